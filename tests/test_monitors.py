import numpy as np
import pytest

from hemoflow.core.constants import NR, NZ
from hemoflow.core.state import Tracer
from hemoflow.monitors.ecg import ecg_sample
from hemoflow.monitors.tracers import TracerCloud


# --- ECG ---

def test_ecg_deterministic():
    assert ecg_sample(1.234, 72) == ecg_sample(1.234, 72)


def test_ecg_r_peak_dominates():
    assert ecg_sample(0.2, 60) > 0.95
    times = np.linspace(0.0, 1.0, 1000, endpoint=False)
    beat = [ecg_sample(t, 60) for t in times]
    assert 0.19 <= times[int(np.argmax(beat))] <= 0.21


def test_ecg_baseline_between_beats():
    assert abs(ecg_sample(0.75, 60)) < 0.01


@pytest.mark.parametrize("hr", [40, 72, 120, 180])
def test_ecg_periodic(hr):
    period = 60.0 / hr
    for t in (0.05, 0.2, 0.3):
        assert ecg_sample(t + 3 * period, hr) == pytest.approx(ecg_sample(t, hr), abs=1e-9)


# --- Tracers ---

def uniform_field(value):
    return np.full((NR, NZ), value)


class TestTracerCloud:

    def test_seeded_spawns_reproducible(self):
        a = TracerCloud(rng=np.random.default_rng(7))
        b = TracerCloud(rng=np.random.default_rng(7))
        field = uniform_field(0.05)
        profile = np.ones(NZ)
        for _ in range(20):
            a.step(field, profile)
            b.step(field, profile)
        assert a.positions() == b.positions()

    def test_spawn_inside_unit_square(self):
        cloud = TracerCloud(rng=np.random.default_rng(0))
        for _ in range(50):
            cloud.spawn()
        for z, r in cloud.positions():
            assert 0.0 <= z < 1.0
            assert 0.0 <= r < 1.0

    def test_count_monotonic_until_cap(self):
        cloud = TracerCloud(max_particles=5, rng=np.random.default_rng(1))
        counts = []
        for _ in range(10):
            cloud.step(uniform_field(0.0), np.ones(NZ))
            counts.append(len(cloud))
        assert counts == [1, 2, 3, 4, 5, 5, 5, 5, 5, 5]

    def test_advect_uniform_flow(self):
        cloud = TracerCloud(gain=0.08)
        cloud.particles.append(Tracer(z=0.1, r=0.5))
        cloud.advect(uniform_field(0.1), np.ones(NZ))
        assert cloud.particles[0].z == pytest.approx(0.1 + 0.1 * 0.08)

    def test_bernoulli_speed_up_in_throat(self):
        profile = np.ones(NZ)
        profile[NZ // 2] = 0.5
        cloud = TracerCloud(gain=0.08)
        z0 = (NZ // 2) / (NZ - 1) + 1e-6
        cloud.particles.append(Tracer(z=z0, r=0.5))
        cloud.advect(uniform_field(0.1), profile)
        assert cloud.particles[0].z == pytest.approx(z0 + 0.1 / 0.5 * 0.08)

    def test_lookup_uses_particle_cell(self):
        field = np.zeros((NR, NZ))
        field[14, 39] = 1.0
        cloud = TracerCloud(gain=0.08)
        # r=0.5 -> floor(0.5*29)=14, z=0.5 -> floor(0.5*79)=39
        cloud.particles.append(Tracer(z=0.5, r=0.5))
        cloud.particles.append(Tracer(z=0.5, r=0.9))
        cloud.advect(field, np.ones(NZ))
        assert cloud.particles[0].z == pytest.approx(0.58)
        assert cloud.particles[1].z == 0.5

    def test_wraps_to_inlet(self):
        cloud = TracerCloud(gain=0.08)
        cloud.particles.append(Tracer(z=0.99, r=0.2))
        cloud.advect(uniform_field(1.0), np.ones(NZ))
        assert cloud.particles[0].z == 0.0

    def test_paused_particles_do_not_move(self):
        cloud = TracerCloud(rng=np.random.default_rng(3))
        cloud.particles.append(Tracer(z=0.3, r=0.3))
        cloud.step(uniform_field(0.5), np.ones(NZ), running=False)
        assert cloud.particles[0].z == 0.3
        assert len(cloud) == 2

    def test_clear(self):
        cloud = TracerCloud(rng=np.random.default_rng(3))
        cloud.spawn()
        cloud.clear()
        assert len(cloud) == 0
        assert cloud.positions() == ()
