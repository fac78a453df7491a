"""Tests for the particle lifecycle engine."""

import random

import pytest

from beamscan.config import ConveyancePolicy, SimulationConfig, TimingProfileName
from beamscan.engine.lifecycle import (
    advance_particles,
    rejected_phase,
    selected_phase,
    step_particle,
)
from beamscan.engine.signals import Cue
from beamscan.model import Particle, ParticleKind, ParticlePhase


def make_particle(
    kind: ParticleKind = ParticleKind.REJECTED,
    particle_id: str = "p1",
    x: float = 400.0,
    y: float = 400.0,
    vx: float = 0.0,
    vy: float = 0.0,
    spawn_time_ms: float = 0.0,
    **kwargs,
) -> Particle:
    """Create a particle at rest unless told otherwise."""
    return Particle(
        id=particle_id,
        kind=kind,
        spawn_time_ms=spawn_time_ms,
        x=x,
        y=y,
        vx=vx,
        vy=vy,
        **kwargs,
    )


def step(particle: Particle, now_ms: float, config: SimulationConfig):
    """Step one particle with a seeded generator."""
    return step_particle(particle, now_ms, config, random.Random(0))


class TestPhaseTables:
    """Tests for the age-to-phase functions."""

    def test_selected_classic_windows(self, config):
        """Fall until 1000ms, charge until 1200ms, then convey."""
        timing = config.timing
        assert selected_phase(999.0, timing) is ParticlePhase.FALLING
        assert selected_phase(1000.0, timing) is ParticlePhase.CHARGING
        assert selected_phase(1199.0, timing) is ParticlePhase.CHARGING
        assert selected_phase(1200.0, timing) is ParticlePhase.CONVEYING

    def test_selected_extended_windows(self):
        """The extended profile charges until 1500ms."""
        timing = SimulationConfig(_env_file=None, timing_profile="extended").timing
        assert selected_phase(1300.0, timing) is ParticlePhase.CHARGING
        assert selected_phase(1500.0, timing) is ParticlePhase.CONVEYING

    def test_rejected_ignites_after_delay(self, config):
        """Ignition starts strictly after 1000ms."""
        assert rejected_phase(1000.0, config.timing) is ParticlePhase.FALLING
        assert rejected_phase(1000.1, config.timing) is ParticlePhase.IGNITING


class TestRejected:
    """Tests for the rejected branch."""

    def test_falling_euler_step(self, config):
        """Gravity, drag and spin apply; life decrements; no burn yet."""
        particle = make_particle(vx=10.0, vy=-1.0, rot_speed=5.0)

        step(particle, 500.0, config)

        assert particle.vy == pytest.approx(-0.9)
        assert particle.y == pytest.approx(399.1)
        assert particle.x == pytest.approx(410.0)
        assert particle.vx == pytest.approx(9.8)
        assert particle.rotation == pytest.approx(5.0)
        assert particle.life == 799
        assert particle.burn_progress == 0.0
        assert particle.phase is ParticlePhase.FALLING

    def test_igniting_burns_with_reduced_gravity(self, config):
        """After the delay burn advances, life freezes, gravity halves."""
        particle = make_particle()

        report = step(particle, 1500.0, config)

        assert particle.phase is ParticlePhase.IGNITING
        assert particle.burn_progress == pytest.approx(0.04)
        assert particle.life == 800
        assert particle.vy == pytest.approx(0.05)
        assert report.cue is Cue.BURN

    def test_burn_cue_only_on_ignition(self, config):
        """The burn cue is raised once per particle."""
        particle = make_particle()
        step(particle, 1500.0, config)

        report = step(particle, 1516.0, config)

        assert report.cue is None

    def test_burn_is_monotonic_and_ends_in_removal(self):
        """burn_progress never decreases; past the threshold the particle is gone."""
        config = SimulationConfig(_env_file=None, viewport_height=3000.0)
        particle = make_particle()
        live = [particle]
        previous = 0.0
        now = 0.0

        while live:
            now += 16.0
            result = advance_particles(live, now, config, random.Random(0))
            assert particle.burn_progress >= previous
            previous = particle.burn_progress
            if particle.burn_progress >= config.burn_threshold:
                assert particle not in result.live
                assert particle in result.despawned
            live = result.live
            assert now < 10_000.0

        assert particle.phase is ParticlePhase.DESPAWNED
        assert particle.burn_progress >= config.burn_threshold

    def test_ceiling_bounce(self, config):
        """Particles flying above the ceiling are clamped and sent down."""
        particle = make_particle(y=151.0, vy=-10.0)

        step(particle, 100.0, config)

        assert particle.y == config.craft_altitude + config.ceiling_margin
        assert particle.vy == pytest.approx(4.95)


class TestRetained:
    """Tests for retained particles."""

    def test_falls_until_life_runs_out(self, config):
        """Retained particles just fall and expire."""
        particle = make_particle(kind=ParticleKind.RETAINED, life=2)

        first = advance_particles([particle], 5000.0, config)
        assert first.live == [particle]
        assert particle.phase is ParticlePhase.FALLING

        second = advance_particles(first.live, 5016.0, config)
        assert second.live == []
        assert second.despawned == [particle]

    def test_never_ignites(self, config):
        """Retained particles do not burn even long after spawn."""
        particle = make_particle(kind=ParticleKind.RETAINED)
        step(particle, 5000.0, config)
        assert particle.burn_progress == 0.0


class TestSelected:
    """Tests for the selected branch."""

    def test_falling_ignores_ceiling(self, config):
        """The selected particle integrates freely while falling."""
        particle = make_particle(kind=ParticleKind.SELECTED, y=151.0, vy=-10.0)

        step(particle, 500.0, config)

        assert particle.y == pytest.approx(141.1)
        assert particle.life == 799

    def test_charging_freezes_and_vibrates(self, config):
        """Velocity is pinned, position jitters, rotation spins."""
        particle = make_particle(kind=ParticleKind.SELECTED, vx=3.0, vy=2.0, rotation=10.0)

        report = step(particle, 1100.0, config)

        assert particle.phase is ParticlePhase.CHARGING
        assert particle.vx == 0.0
        assert particle.vy == 0.0
        assert abs(particle.x - 400.0) <= config.charge_jitter
        assert abs(particle.y - 400.0) <= config.charge_jitter
        assert particle.rotation == pytest.approx(35.0)
        assert report.cue is Cue.TRACTOR

    def test_tractor_cue_once(self, config):
        """The tractor cue fires on entering the charge only."""
        particle = make_particle(kind=ParticleKind.SELECTED)
        step(particle, 1100.0, config)
        assert step(particle, 1116.0, config).cue is None

    def test_conveying_proportional_step(self, config):
        """Each tick closes a fixed fraction of the distance to the destination."""
        particle = make_particle(kind=ParticleKind.SELECTED, x=240.0, y=300.0, rotation=100.0)
        target_x, target_y = config.destination

        report = step(particle, 1300.0, config)

        assert particle.phase is ParticlePhase.CONVEYING
        assert particle.x == pytest.approx(240.0 + (target_x - 240.0) * 0.25)
        assert particle.y == pytest.approx(300.0 + (target_y - 300.0) * 0.25)
        assert particle.rotation == pytest.approx(70.0)
        assert particle.vx == 0.0 and particle.vy == 0.0
        assert particle.life == 800
        assert report.conveyance_point is not None
        assert report.conveyance_point.x == pytest.approx(particle.x)

    def test_arrival_completes(self, config):
        """Within epsilon on both axes the particle is handed over."""
        target_x, target_y = config.destination
        particle = make_particle(kind=ParticleKind.SELECTED, x=target_x + 5.0, y=target_y - 5.0)

        result = advance_particles([particle], 2000.0, config)

        assert particle.phase is ParticlePhase.COMPLETED
        assert result.completed == [particle]
        assert result.live == []
        assert result.conveyance_target is None

    def test_conveying_reports_beam_target(self, config):
        """While in flight the particle is the beam endpoint."""
        particle = make_particle(kind=ParticleKind.SELECTED, x=100.0, y=200.0)

        result = advance_particles([particle], 1300.0, config)

        assert result.live == [particle]
        assert result.conveyance_target is not None
        assert result.conveyance_target.x == pytest.approx(particle.x)
        assert result.conveyance_target.y == pytest.approx(particle.y)

    def test_eventually_arrives(self, config):
        """The exponential approach always reaches the destination."""
        particle = make_particle(kind=ParticleKind.SELECTED, x=0.0, y=150.0)
        live = [particle]
        now = 1200.0
        for _ in range(100):
            result = advance_particles(live, now, config)
            live = result.live
            if result.completed:
                break
            now += 16.0
        assert particle.phase is ParticlePhase.COMPLETED


class TestConveyanceArbitration:
    """Tests for the beam target with several conveying particles."""

    def make_pair(self):
        older = make_particle(kind=ParticleKind.SELECTED, particle_id="old", x=100.0, spawn_time_ms=0.0)
        newer = make_particle(kind=ParticleKind.SELECTED, particle_id="new", x=900.0, spawn_time_ms=100.0)
        return older, newer

    def test_oldest_drives_beam_by_default(self, config):
        """The default policy follows the oldest conveying particle."""
        older, newer = self.make_pair()
        assert config.conveyance_policy is ConveyancePolicy.OLDEST

        result = advance_particles([older, newer], 2000.0, config)

        assert result.conveyance_target.x == pytest.approx(older.x)

    def test_last_policy_follows_last_computed(self):
        """The 'last' policy keeps the last particle in iteration order."""
        config = SimulationConfig(_env_file=None, conveyance_policy="last")
        older, newer = self.make_pair()

        result = advance_particles([older, newer], 2000.0, config)

        assert result.conveyance_target.x == pytest.approx(newer.x)


class TestAdvanceParticles:
    """Tests for advance_particles() bookkeeping."""

    def test_offscreen_failsafe(self, config):
        """Particles below the viewport are removed in any phase."""
        particle = make_particle(kind=ParticleKind.RETAINED, y=config.viewport_height + 500.0)

        result = advance_particles([particle], 100.0, config)

        assert result.live == []
        assert particle.phase is ParticlePhase.DESPAWNED

    def test_removal_follows_alive(self, config):
        """A particle is kept exactly while it is alive and on screen."""
        expiring = make_particle(kind=ParticleKind.RETAINED, particle_id="a", life=1)
        healthy = make_particle(kind=ParticleKind.RETAINED, particle_id="b", life=5)

        result = advance_particles([expiring, healthy], 100.0, config)

        assert expiring.alive is False
        assert healthy.alive is True
        assert result.live == [healthy]
        assert result.despawned == [expiring]

    def test_terminal_particles_are_dropped(self, config):
        """Already terminal particles are not stepped or kept."""
        done = make_particle(phase=ParticlePhase.COMPLETED)
        result = advance_particles([done], 100.0, config)
        assert result.live == []
        assert result.completed == []

    def test_does_not_mutate_input_list(self, config):
        """The next collection is a new list."""
        particles = [make_particle(kind=ParticleKind.RETAINED, life=1)]
        result = advance_particles(particles, 100.0, config)
        assert len(particles) == 1
        assert result.live == []

    def test_collects_cues(self, config):
        """Cues from all particles are reported together."""
        burning = make_particle(particle_id="a")
        charging = make_particle(kind=ParticleKind.SELECTED, particle_id="b")

        result = advance_particles([burning, charging], 1100.0, config)

        assert sorted(result.cues) == sorted([Cue.BURN, Cue.TRACTOR])

    def test_extended_profile_still_charging(self):
        """With the extended table the particle is not conveying at 1300ms."""
        config = SimulationConfig(_env_file=None, timing_profile=TimingProfileName.EXTENDED)
        particle = make_particle(kind=ParticleKind.SELECTED)
        advance_particles([particle], 1300.0, config)
        assert particle.phase is ParticlePhase.CHARGING
