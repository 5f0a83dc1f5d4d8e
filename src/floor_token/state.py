"""
Persisted range state and the reentrancy guard.

`RangeState` holds the five persisted fields as typed attributes (plus the
immutable bin step). It is owned by the host and mutated only through the
setters below, which enforce the range invariants:

  - floor_id never decreases;
  - once roof_id != 0, floor_id <= roof_id.

The guard is a single shared status flag: while any guarded operation runs,
every other guarded operation is rejected with ReentrantCall.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Iterator

from .core.constants import STATUS_ENTERED, STATUS_NOT_ENTERED
from .core.exc import InvariantViolation, ReentrantCall
from .core.fixed_point import check_u256, check_u32

logger = logging.getLogger(__name__)


class Status(IntEnum):
    NOT_ENTERED = STATUS_NOT_ENTERED
    ENTERED = STATUS_ENTERED


@dataclass
class RangeState:
    floor_id: int
    roof_id: int = 0
    bin_step: int = 1
    floor_per_bin: int = 0
    rebalance_paused: bool = False
    status: Status = Status.NOT_ENTERED

    def __post_init__(self):
        check_u32(self.floor_id, "floor_id")
        check_u32(self.roof_id, "roof_id")
        check_u256(self.floor_per_bin, "floor_per_bin")
        if self.bin_step <= 0:
            raise InvariantViolation(f"bin_step must be > 0 (got {self.bin_step})")

    @classmethod
    def initial(cls, active_id: int, bin_step: int, floor_per_bin: int) -> "RangeState":
        """State at construction: floor at the initial active id, roof unset."""
        return cls(floor_id=active_id, roof_id=0, bin_step=bin_step, floor_per_bin=floor_per_bin)

    # ------------- setters -------------

    def set_floor_id(self, new_floor_id: int) -> None:
        check_u32(new_floor_id, "floor_id")
        if new_floor_id < self.floor_id:
            raise InvariantViolation(
                f"floor id cannot decrease ({self.floor_id} -> {new_floor_id})"
            )
        if self.roof_id != 0 and new_floor_id > self.roof_id:
            raise InvariantViolation(
                f"floor id {new_floor_id} above roof id {self.roof_id}"
            )
        logger.debug("floor_id %d -> %d", self.floor_id, new_floor_id)
        self.floor_id = new_floor_id

    def set_roof_id(self, new_roof_id: int) -> None:
        check_u32(new_roof_id, "roof_id")
        if new_roof_id != 0 and new_roof_id < self.floor_id:
            raise InvariantViolation(
                f"roof id {new_roof_id} below floor id {self.floor_id}"
            )
        logger.debug("roof_id %d -> %d", self.roof_id, new_roof_id)
        self.roof_id = new_roof_id

    def set_rebalance_paused(self, paused: bool) -> None:
        self.rebalance_paused = bool(paused)

    # ------------- snapshots -------------

    def snapshot(self) -> "RangeState":
        return replace(self)

    def restore(self, saved: "RangeState") -> None:
        self.floor_id = saved.floor_id
        self.roof_id = saved.roof_id
        self.bin_step = saved.bin_step
        self.floor_per_bin = saved.floor_per_bin
        self.rebalance_paused = saved.rebalance_paused
        self.status = saved.status


class ReentrancyGuard:
    """Two-state guard over `RangeState.status`."""

    def __init__(self, state: RangeState) -> None:
        self._state = state

    @property
    def status(self) -> Status:
        return self._state.status

    def is_entered(self) -> bool:
        return self._state.status == Status.ENTERED

    def enter(self) -> None:
        if self._state.status == Status.ENTERED:
            raise ReentrantCall()
        self._state.status = Status.ENTERED

    def exit(self) -> None:
        self._state.status = Status.NOT_ENTERED

    @contextmanager
    def guarded(self) -> Iterator[None]:
        """Hold the guard for the body; released on every exit path."""
        self.enter()
        try:
            yield
        finally:
            self.exit()


__all__ = ["Status", "RangeState", "ReentrancyGuard"]
