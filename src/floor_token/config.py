"""
Configuration of a floor token instance.

`FloorTokenConfig` is validated on construction, like the integer amount types
of the core: an invalid value never produces a config object. Large integers may
be given as ints or as decimal strings (JSON tooling often cannot carry u256
values as numbers).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

from .core import U16_MAX, U32_MAX, U256_MAX, ZERO_ADDRESS, ConfigError


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ConfigError(f"{name} must be an integer or a decimal string, got {value!r}")


def _as_address(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name} must be a non-empty address string")
    if value == ZERO_ADDRESS:
        raise ConfigError(f"{name} cannot be the zero address")
    return value


@dataclass(frozen=True)
class FloorTokenConfig:
    """Deployment parameters.

    Fields:
    - token_y: address of the counter asset.
    - initial_active_id: active bin at deployment; becomes the first floor id.
    - bin_step: price step between bins, in basis points.
    - floor_per_bin: floor tokens deposited per roof bin.
    - owner: account allowed to move the roof and pause rebalancing.
    - tax_recipient: account whose balance is not circulating supply (optional).
    - circulation_excluded: further accounts excluded from circulating supply.
    """

    token_y: str
    initial_active_id: int
    bin_step: int
    floor_per_bin: int
    owner: str
    tax_recipient: Optional[str] = None
    circulation_excluded: Tuple[str, ...] = ()

    def __post_init__(self):
        _as_address("token_y", self.token_y)
        _as_address("owner", self.owner)
        if self.tax_recipient is not None:
            _as_address("tax_recipient", self.tax_recipient)
        for account in self.circulation_excluded:
            _as_address("circulation_excluded", account)

        for name in ("initial_active_id", "bin_step", "floor_per_bin"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")

        if not 0 < self.initial_active_id <= U32_MAX:
            raise ConfigError(f"initial_active_id out of range: {self.initial_active_id}")
        if not 0 < self.bin_step <= U16_MAX:
            raise ConfigError(f"bin_step out of range: {self.bin_step}")
        if not 0 <= self.floor_per_bin <= U256_MAX:
            raise ConfigError(f"floor_per_bin out of range: {self.floor_per_bin}")

    def excluded_accounts(self) -> Tuple[str, ...]:
        """Accounts whose balances never count as circulating (tax recipient first)."""
        accounts = []
        if self.tax_recipient is not None:
            accounts.append(self.tax_recipient)
        for account in self.circulation_excluded:
            if account not in accounts:
                accounts.append(account)
        return tuple(accounts)

    # ------------- constructors -------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FloorTokenConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config keys: {', '.join(unknown)}")
        missing = sorted(
            f.name for f in fields(cls)
            if f.name not in data and f.name not in ("tax_recipient", "circulation_excluded")
        )
        if missing:
            raise ConfigError(f"missing config keys: {', '.join(missing)}")

        excluded = data.get("circulation_excluded", ())
        if isinstance(excluded, str) or not isinstance(excluded, (list, tuple)):
            raise ConfigError("circulation_excluded must be a list of addresses")

        return cls(
            token_y=data["token_y"],
            initial_active_id=_as_int("initial_active_id", data["initial_active_id"]),
            bin_step=_as_int("bin_step", data["bin_step"]),
            floor_per_bin=_as_int("floor_per_bin", data["floor_per_bin"]),
            owner=data["owner"],
            tax_recipient=data.get("tax_recipient"),
            circulation_excluded=tuple(excluded),
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "FloorTokenConfig":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            raise ConfigError(f"invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top-level JSON value must be an object")
        return cls.from_mapping(data)


__all__ = ["FloorTokenConfig"]
