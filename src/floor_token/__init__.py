# Top-level API for floor_token (integer-domain).
"""
Top-level API for floor_token.

This module exposes the stable interface of the floor mechanism:
  - FloorToken: host object (queries, owner operations, transfer hook)
  - RebalanceEngine / RoofManager: the two guarded liquidity operations
  - PairGateway / TokenLedger / CounterAsset: interfaces to implement for a pair and ledgers
  - FloorTokenConfig: deployment parameters

Integer-domain primitives (fixed-point math, datatypes, exceptions) live in
`floor_token.core`.
"""

from __future__ import annotations

from .config import FloorTokenConfig
from .contract import Event, FloorToken
from .gateway import CounterAsset, PairGateway, TokenLedger, net_reserves
from .hooks import TokenHooks, TransferHook
from .rebalance import RebalanceEngine
from .roof import RoofManager
from .state import RangeState, ReentrancyGuard, Status

from .core import (
    BinReserves,
    BinSnapshot,
    MintResult,
    price_from_id,
    FloorTokenError,
    PreconditionViolation,
    InvariantViolation,
    ReentrantCall,
)

__all__ = [
    "FloorToken",
    "Event",
    "FloorTokenConfig",
    "RebalanceEngine",
    "RoofManager",
    "TokenHooks",
    "TransferHook",
    "PairGateway",
    "TokenLedger",
    "CounterAsset",
    "net_reserves",
    "RangeState",
    "ReentrancyGuard",
    "Status",
    "BinReserves",
    "BinSnapshot",
    "MintResult",
    "price_from_id",
    "FloorTokenError",
    "PreconditionViolation",
    "InvariantViolation",
    "ReentrantCall",
]
