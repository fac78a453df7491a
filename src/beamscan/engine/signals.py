"""Best-effort notifications to audio/visual collaborators.

The core emits cues (new acquisition, firing, ignition, tractor charge) and
the craft's drift speed. Sinks are optional; a failing sink is logged and
skipped so it can never affect simulation state.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Protocol

logger = logging.getLogger(__name__)


class Cue(StrEnum):
    """Discrete events a collaborator may react to."""

    SCAN = "scan"  # in-range set grew
    POP = "pop"  # a batch was fired
    BURN = "burn"  # a rejected particle ignited
    TRACTOR = "tractor"  # a selected particle started charging


class SignalSink(Protocol):
    """Receiver for core notifications."""

    def cue(self, cue: Cue) -> None: ...

    def drift(self, speed: float) -> None: ...


class CueRecorder:
    """Sink that buffers cues until the next frame is projected."""

    def __init__(self) -> None:
        self._pending: list[Cue] = []
        self.last_drift: float = 0.0

    def cue(self, cue: Cue) -> None:
        self._pending.append(cue)

    def drift(self, speed: float) -> None:
        self.last_drift = speed

    def drain(self) -> list[Cue]:
        """Return and clear the buffered cues."""
        cues, self._pending = self._pending, []
        return cues


class SignalRelay:
    """Fan-out to any number of sinks, isolating each from failures."""

    def __init__(self, sinks: list[SignalSink] | None = None) -> None:
        self._sinks: list[SignalSink] = list(sinks or [])

    @property
    def sinks(self) -> list[SignalSink]:
        return list(self._sinks)

    def attach(self, sink: SignalSink) -> None:
        self._sinks.append(sink)

    def detach(self, sink: SignalSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def cue(self, cue: Cue) -> None:
        for sink in self._sinks:
            try:
                sink.cue(cue)
            except Exception:
                logger.exception("Signal sink %r failed on cue '%s'", sink, cue.value)

    def drift(self, speed: float) -> None:
        for sink in self._sinks:
            try:
                sink.drift(speed)
            except Exception:
                logger.exception("Signal sink %r failed on drift update", sink)
