import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from hemoflow.core.constants import NR, NZ, RHO, DT, SEVERITY_SCALE, PulseTuning
from hemoflow.core.state import SimulationParameters
from .geometry import narrowing_profile
from .rheology import plasma_viscosity, quemada_viscosity

_PULSE = PulseTuning()


def pressure_gradient(time: float, hr: float, tuning: PulseTuning = _PULSE) -> float:
    """Global oscillating axial pressure gradient G(t) driven at the heart rate."""
    omega = 2.0 * math.pi * (hr / 60.0)
    return tuning.mean_gradient + tuning.amplitude * math.sin(omega * time)


@dataclass(frozen=True)
class SolverStep:
    """Per-sub-step quantities consumed by the metrics aggregator."""
    time: float                 # Time at which G was evaluated (start of step)
    pressure_gradient: float
    max_velocity: float         # m/s, interior cells, floored at 0
    max_shear: float            # max |du/dr| (1/s)
    volumetric_flow: float      # Midpoint column flow (m^3/s)
    plasma_viscosity: float     # Pa*s


class MomentumSolver:
    """
    Explicit axial momentum solver for pulsatile flow in a narrowed tube.

    du/dt = G_local/rho + mu_eff/rho * (d2u/dr2 + (1/r) du/dr)

    Forward Euler in time, central differences in r, one radial profile per
    axial column. Columns are coupled only through the geometry: each
    column sees its own radius R(j) = R0 * rho(j) and a pressure gradient
    scaled by rho(j)^-4 (Hagen-Poiseuille) so flow is conserved through
    the constriction.

    Double buffered: the new grid is built entirely from the previous one
    and then swapped in, so no cell reads a value written in the same step.

    No stability (CFL-like) check is performed. DT and the grid were tuned
    together; outside that envelope the field can blow up.

    Units:
        - radius: m (parameters carry mm)
        - u: m/s
        - mu: Pa*s
    """
    def __init__(self, dt: float = DT, severity_scale: float = SEVERITY_SCALE,
                 nr: int = NR, nz: int = NZ):
        self.dt = dt
        self.severity_scale = severity_scale
        self.nr = nr
        self.nz = nz
        self._radial_index = np.arange(1, nr - 1, dtype=float)[:, None]
        self._mid = nz // 2
        self.field = np.zeros((nr, nz))
        self.time = 0.0
        self.step_count = 0

    def clear(self):
        """Zero the field and the clock."""
        self.field = np.zeros((self.nr, self.nz))
        self.time = 0.0
        self.step_count = 0

    def load(self, field, time: float, step_count: Optional[int] = None):
        """Restore solver state (e.g. from a checkpoint)."""
        arr = np.array(field, dtype=float)
        if arr.shape != (self.nr, self.nz):
            raise ValueError(
                f"Velocity field must have shape {(self.nr, self.nz)}, got {arr.shape}"
            )
        self.field = arr
        self.time = float(time)
        if step_count is None:
            step_count = int(round(self.time / self.dt))
        self.step_count = int(step_count)

    def step(self, params: SimulationParameters,
             profile: Optional[np.ndarray] = None) -> SolverStep:
        """
        Advance the field by one sub-step of dt seconds.
        """
        if profile is None:
            profile = narrowing_profile(params.stenosis_severity, self.severity_scale, self.nz)

        dt = self.dt
        u = self.field
        g = pressure_gradient(self.time, params.hr)

        # Column geometry.
        radius = params.radius_m * profile
        dr = radius / (self.nr - 1)
        g_local = g / profile ** 4

        mu_plasma = plasma_viscosity(params.cholesterol)
        h = params.hct_fraction

        # Interior cells (i = 1 .. NR-2), derivatives from the previous field.
        # A diverged field overflows here; the engine reports it once.
        with np.errstate(over="ignore", invalid="ignore"):
            u_up = u[2:]
            u_c = u[1:-1]
            u_dn = u[:-2]
            du_dr = (u_up - u_dn) / (2.0 * dr)
            d2u_dr2 = (u_up - 2.0 * u_c + u_dn) / (dr * dr)
            r = self._radial_index * dr

            shear = np.abs(du_dr)
            mu_eff = quemada_viscosity(shear, h, mu_plasma)

            viscous = mu_eff * (d2u_dr2 + du_dr / r)
            inner = u_c + dt * (g_local / RHO + viscous / RHO)

            new_field = np.empty_like(u)
            new_field[1:-1] = inner
            # No-slip wall, symmetric centreline.
            new_field[-1] = 0.0
            new_field[0] = new_field[1]

            # fmax ignores NaN so a diverging cell does not hide the rest.
            max_velocity = float(np.fmax.reduce(inner, axis=None, initial=0.0))
            max_shear = float(np.fmax.reduce(shear, axis=None, initial=0.0))

            # Volumetric flow through the midpoint column: sum u * 2*pi*r * dr.
            dr_mid = dr[self._mid]
            r_mid = np.arange(self.nr, dtype=float) * dr_mid
            q = float(np.sum(new_field[:, self._mid] * 2.0 * math.pi * r_mid * dr_mid))

        step_time = self.time
        self.field = new_field
        self.time += dt
        self.step_count += 1

        return SolverStep(
            time=step_time,
            pressure_gradient=g,
            max_velocity=max_velocity,
            max_shear=max_shear,
            volumetric_flow=q,
            plasma_viscosity=mu_plasma,
        )
