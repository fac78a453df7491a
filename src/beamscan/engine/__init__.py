"""Simulation core: beam geometry, craft motion, scanning, spawning, lifecycle, merge."""

from beamscan.engine.beam import BEAM_SPREAD, contains
from beamscan.engine.lifecycle import LifecycleResult, advance_particles, step_particle
from beamscan.engine.merge import CollectedSet, DeferredQueue, MergeBuffer
from beamscan.engine.motion import compute_target_tilt, step_craft
from beamscan.engine.scanner import TargetScanner, scan_targets
from beamscan.engine.signals import Cue, CueRecorder, SignalRelay, SignalSink
from beamscan.engine.simulation import activate_target, mark_viewed, reset_session, tick_session
from beamscan.engine.spawn import spawn_batch

__all__ = [
    "BEAM_SPREAD",
    "CollectedSet",
    "Cue",
    "CueRecorder",
    "DeferredQueue",
    "LifecycleResult",
    "MergeBuffer",
    "SignalRelay",
    "SignalSink",
    "TargetScanner",
    "activate_target",
    "advance_particles",
    "compute_target_tilt",
    "contains",
    "mark_viewed",
    "reset_session",
    "scan_targets",
    "spawn_batch",
    "step_craft",
    "step_particle",
    "tick_session",
]
