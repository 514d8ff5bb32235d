# optimizer.py
"""
Optimization run: a progress bar that, once full, commits the precomputed
target allocation over the current one.

    IDLE --start()--> RUNNING --tick() reaches 100--> SETTLING --settle()--> IDLE

The run itself owns no timers. The engine calls ``tick()`` every
``interval_ms`` while RUNNING and ``settle()`` once, ``settle_delay_ms``
after the run entered SETTLING.
"""

import logging
from enum import Enum
from typing import Iterable, List

from errors import InvalidConfiguration
from models import AllocationAsset, OptimizationProgress

logger = logging.getLogger(__name__)

COMPLETE = 100.0


class OptimizationState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    SETTLING = "SETTLING"


class AllocationBook:
    def __init__(self, assets: Iterable[AllocationAsset]):
        self.assets: List[AllocationAsset] = list(assets)
        if not self.assets:
            raise InvalidConfiguration("allocation seed set must not be empty")

    def commit_targets(self) -> None:
        self.assets = [a.model_copy(update={"current_allocation": a.target_allocation}) for a in self.assets]

    def snapshot(self) -> List[AllocationAsset]:
        return list(self.assets)


class OptimizationRun:
    def __init__(self, book: AllocationBook, step: float = 2.0):
        if step <= 0:
            raise InvalidConfiguration(f"optimization step must be > 0, got {step}")
        self.book = book
        self.step = step
        self.state = OptimizationState.IDLE
        self.progress = 0.0
        self.commits = 0

    @property
    def running(self) -> bool:
        return self.state is OptimizationState.RUNNING

    def start(self) -> bool:
        """Begin a run. Returns False (and changes nothing) unless idle."""
        if self.state is not OptimizationState.IDLE:
            logger.debug("optimization start ignored: run is %s", self.state.value)
            return False
        self.progress = 0.0
        self.state = OptimizationState.RUNNING
        logger.info("optimization run started")
        return True

    def tick(self) -> bool:
        """Advance progress by one step. Returns whether the run is still RUNNING."""
        if self.state is not OptimizationState.RUNNING:
            return False
        self.progress = min(COMPLETE, self.progress + self.step)
        if self.progress >= COMPLETE:
            self.state = OptimizationState.SETTLING
            logger.info("optimization run complete, settling")
            return False
        return True

    def settle(self) -> bool:
        """Commit targets into current allocations and return to IDLE.

        Only acts from SETTLING with progress at exactly 100; returns whether a
        commit happened.
        """
        if self.state is not OptimizationState.SETTLING or self.progress != COMPLETE:
            return False
        self.book.commit_targets()
        self.commits += 1
        self.progress = 0.0
        self.state = OptimizationState.IDLE
        logger.info("optimized allocation committed (%d total)", self.commits)
        return True

    def reset(self) -> None:
        """Abandon any run in flight without committing."""
        self.progress = 0.0
        self.state = OptimizationState.IDLE

    def snapshot(self) -> OptimizationProgress:
        return OptimizationProgress(
            state=self.state.value,
            progress=self.progress,
            running=self.running,
            commits=self.commits,
        )
