# voice.py
"""
Voice command pipeline.

One command at a time moves through explicit stages:

    IDLE -> CAPTURING -> TRANSCRIBED -> PROCESSING -> EXECUTED -> IDLE
                                             |
                                             +------> FAILED -> IDLE

Every stage change goes through ``_transition`` and is checked against
``VALID_TRANSITIONS``. The pipeline owns no timers: ``advance()`` performs the
next stage change and returns how long (ms) the caller should wait before
calling it again, or ``None`` once the command is finished.

History is most-recent-first. A record is written once as ``processing`` and
replaced once more with its terminal status; terminal records are never
touched again.
"""

import itertools
import logging
import random
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set

from errors import InvalidConfiguration
from models import VoiceCommand, VoiceState
from random_walk import RandomSource

logger = logging.getLogger(__name__)


class VoiceStage(str, Enum):
    IDLE = "IDLE"
    CAPTURING = "CAPTURING"
    TRANSCRIBED = "TRANSCRIBED"
    PROCESSING = "PROCESSING"
    EXECUTED = "EXECUTED"
    FAILED = "FAILED"


VALID_TRANSITIONS: Dict[VoiceStage, Set[VoiceStage]] = {
    VoiceStage.IDLE: {VoiceStage.CAPTURING},
    VoiceStage.CAPTURING: {VoiceStage.TRANSCRIBED, VoiceStage.IDLE},
    VoiceStage.TRANSCRIBED: {VoiceStage.PROCESSING, VoiceStage.IDLE},
    VoiceStage.PROCESSING: {VoiceStage.EXECUTED, VoiceStage.FAILED},
    VoiceStage.EXECUTED: {VoiceStage.IDLE},
    VoiceStage.FAILED: {VoiceStage.IDLE},
}


class InvalidTransition(RuntimeError):
    pass


class VoicePipeline:
    def __init__(
        self,
        example_commands: Sequence[str],
        capture_delay_ms: int = 2000,
        interpret_delay_ms: int = 1000,
        execute_delay_ms: int = 2000,
        history: Iterable[VoiceCommand] = (),
        history_limit: int = 0,
        rng: Optional[RandomSource] = None,
    ):
        if not example_commands:
            raise InvalidConfiguration("example command set must not be empty")
        self.example_commands = tuple(example_commands)
        self.capture_delay_ms = capture_delay_ms
        self.interpret_delay_ms = interpret_delay_ms
        self.execute_delay_ms = execute_delay_ms
        self.history_limit = history_limit
        self.rng = rng if rng is not None else random.Random()

        self.history: List[VoiceCommand] = list(history)
        if history_limit:
            del self.history[history_limit:]
        self.stage = VoiceStage.IDLE
        self.transcript = ""
        self.active_id: Optional[str] = None
        self._requested: Optional[str] = None

        numeric = [int(c.id) for c in self.history if c.id.isdigit()]
        self._ids = itertools.count(max(numeric, default=0) + 1)

    @property
    def busy(self) -> bool:
        return self.stage is not VoiceStage.IDLE

    def _transition(self, new: VoiceStage) -> None:
        if new not in VALID_TRANSITIONS[self.stage]:
            raise InvalidTransition(f"{self.stage.value} -> {new.value}")
        logger.debug("voice pipeline %s -> %s", self.stage.value, new.value)
        self.stage = new

    def begin_capture(self, command: Optional[str] = None) -> bool:
        """Start listening. Returns False without side effects if a command is in flight.

        ``command`` fixes what will be "heard"; otherwise one of the example
        commands is picked when the capture completes.
        """
        if self.busy:
            logger.debug("voice capture ignored: pipeline is %s", self.stage.value)
            return False
        self._requested = command
        self._transition(VoiceStage.CAPTURING)
        logger.info("voice capture started")
        return True

    def advance(self) -> Optional[int]:
        if self.stage is VoiceStage.CAPTURING:
            self.transcript = self._requested if self._requested is not None else self.rng.choice(self.example_commands)
            self._transition(VoiceStage.TRANSCRIBED)
            return self.interpret_delay_ms

        if self.stage is VoiceStage.TRANSCRIBED:
            record = VoiceCommand(
                id=str(next(self._ids)),
                command=self.transcript,
                interpretation=f"Interpreted: {self.transcript}",
                action="Processing...",
                status="processing",
                timestamp="Just now",
            )
            self.history.insert(0, record)
            if self.history_limit and len(self.history) > self.history_limit:
                del self.history[self.history_limit:]
            self.active_id = record.id
            self._transition(VoiceStage.PROCESSING)
            return self.execute_delay_ms

        if self.stage is VoiceStage.PROCESSING:
            self._finish("executed", "Order executed successfully", VoiceStage.EXECUTED)
            return None

        raise InvalidTransition(f"nothing to advance from {self.stage.value}")

    def delay_ms(self) -> int:
        """Wait before the next ``advance()`` from the current stage."""
        return {
            VoiceStage.CAPTURING: self.capture_delay_ms,
            VoiceStage.TRANSCRIBED: self.interpret_delay_ms,
            VoiceStage.PROCESSING: self.execute_delay_ms,
        }[self.stage]

    def fail(self, reason: str = "Command failed") -> bool:
        """Mark the command being processed as failed. Only valid while PROCESSING."""
        if self.stage is not VoiceStage.PROCESSING:
            return False
        self._finish("failed", reason, VoiceStage.FAILED)
        return True

    def cancel(self) -> None:
        """Drop whatever is in flight and return to IDLE.

        A record already in history as ``processing`` is closed as failed so
        it does not stay pending forever.
        """
        if self.stage is VoiceStage.PROCESSING:
            self._finish("failed", "Cancelled", VoiceStage.FAILED)
        elif self.busy:
            self._transition(VoiceStage.IDLE)
            self._clear()

    def _finish(self, status: str, action: str, terminal: VoiceStage) -> None:
        for i, cmd in enumerate(self.history):
            if cmd.id == self.active_id:
                if cmd.status == "processing":
                    self.history[i] = cmd.model_copy(update={"status": status, "action": action})
                break
        logger.info("voice command %s %s", self.active_id, status)
        self._transition(terminal)
        self._transition(VoiceStage.IDLE)
        self._clear()

    def _clear(self) -> None:
        self.transcript = ""
        self.active_id = None
        self._requested = None

    def state(self) -> VoiceState:
        return VoiceState(
            stage=self.stage.value,
            listening=self.busy,
            transcript=self.transcript,
            active_command_id=self.active_id,
        )

    def snapshot(self) -> List[VoiceCommand]:
        return list(self.history)
