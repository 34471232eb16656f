from typing import List, Optional, Tuple

import numpy as np

from hemoflow.core.constants import MAX_PARTICLES, TRACER_GAIN
from hemoflow.core.state import Tracer
from hemoflow.core.utils import grid_index


class TracerCloud:
    """
    Massless red-cell tracers advected through the velocity field.

    Visualization only: particles never feed back into the solver.
    One particle is spawned per tick until the cap is reached; while the
    simulation runs, each particle moves downstream at the local velocity
    divided by the narrowing factor (Bernoulli speed-up in the throat) and
    re-enters at the inlet once it leaves the segment.
    """
    def __init__(self, max_particles: int = MAX_PARTICLES, gain: float = TRACER_GAIN,
                 rng: Optional[np.random.Generator] = None):
        self.max_particles = max_particles
        self.gain = gain
        self.rng = rng if rng is not None else np.random.default_rng()
        self.particles: List[Tracer] = []

    def __len__(self) -> int:
        return len(self.particles)

    def clear(self):
        self.particles = []

    def spawn(self) -> Optional[Tracer]:
        """Add one particle at a uniformly random position, if below the cap."""
        if len(self.particles) >= self.max_particles:
            return None
        z, r = self.rng.random(2)
        tracer = Tracer(z=float(z), r=float(r))
        self.particles.append(tracer)
        return tracer

    def advect(self, field: np.ndarray, profile: np.ndarray):
        nr, nz = field.shape
        for p in self.particles:
            j = grid_index(p.z, nz)
            i = grid_index(p.r, nr)
            p.z += float(field[i, j] / profile[j]) * self.gain
            if p.z > 1.0:
                p.z = 0.0

    def step(self, field: np.ndarray, profile: np.ndarray, running: bool = True):
        """One render tick: spawn, then advect if the solver is running."""
        self.spawn()
        if running:
            self.advect(field, profile)

    def positions(self) -> Tuple[Tuple[float, float], ...]:
        return tuple((p.z, p.r) for p in self.particles)
