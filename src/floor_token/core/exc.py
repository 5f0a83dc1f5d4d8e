"""
Core exception types for floor_token.

These are dependency-free and may be imported by all modules. Precondition
violations abort a call before any state change; invariant violations are
fatal and abort the whole call.
"""

__all__ = [
    "FloorTokenError",
    "AmountDomainError",
    "MathOverflow",
    "PreconditionViolation",
    "ZeroBins",
    "Unauthorized",
    "RebalancePaused",
    "ActiveAboveRoof",
    "RoofOutOfRange",
    "ReentrantCall",
    "InvariantViolation",
    "ConfigError",
]


class FloorTokenError(Exception):
    """Base class for all floor_token errors."""
    pass


class AmountDomainError(FloorTokenError):
    """Raised when inputs violate the non-negative domain or basic preconditions."""
    pass


class MathOverflow(FloorTokenError):
    """Raised when a result does not fit the u256 (or u32 for ids) range."""
    pass


class PreconditionViolation(FloorTokenError):
    """Raised when a call is rejected before touching any state."""
    pass


class ZeroBins(PreconditionViolation):
    """Raised when a roof operation is requested for zero bins."""

    def __init__(self, msg: str = "FloorToken: zero bins"):
        super().__init__(msg)


class Unauthorized(PreconditionViolation):
    """Raised when a restricted entry point is called by someone else than the owner.

    Attributes
    ----------
    caller : str
        The rejected caller address.
    """

    def __init__(self, caller):
        super().__init__(f"FloorToken: caller {caller!r} is not the owner")
        self.caller = caller


class RebalancePaused(PreconditionViolation):
    """Raised when a rebalance is forced while rebalancing is paused."""

    def __init__(self, msg: str = "FloorToken: rebalance paused"):
        super().__init__(msg)


class ActiveAboveRoof(PreconditionViolation):
    """Raised when the active bin sits above the current roof.

    Attributes
    ----------
    active_id : int
    roof_id : int
    """

    def __init__(self, active_id: int, roof_id: int):
        super().__init__(
            f"FloorToken: active bin above roof (active_id={active_id}, roof_id={roof_id})"
        )
        self.active_id = active_id
        self.roof_id = roof_id


class RoofOutOfRange(PreconditionViolation):
    """Raised when a requested roof id is outside the allowed range."""
    pass


class ReentrantCall(PreconditionViolation):
    """Raised when a guarded operation is entered while another one is running."""

    def __init__(self, msg: str = "FloorToken: reentrant call"):
        super().__init__(msg)


class InvariantViolation(FloorTokenError):
    """Raised when an external call left reserves or minted amounts in an unexpected state."""
    pass


class ConfigError(FloorTokenError):
    """Raised when a configuration value is missing or invalid."""
    pass
