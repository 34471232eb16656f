import numpy as np
from scipy.optimize import root_scalar
from typing import Tuple

from hemoflow.core.constants import NR, NZ, SHEAR_FLOOR, SEVERITY_SCALE, PulseTuning
from hemoflow.core.state import SimulationParameters
from hemoflow.physiology.geometry import narrowing_profile
from hemoflow.physiology.rheology import (
    plasma_viscosity, quemada_viscosity, high_shear_viscosity
)


class SteadyFlowSolver:
    """
    Solves for the steady Poiseuille flow under the mean pressure gradient,
    used to start the momentum solver from a developed profile instead of
    from rest.

    For each column the Quemada viscosity is made self-consistent with the
    wall shear rate of the Poiseuille profile it produces:

        shear_w = G * R / (2 * mu_eff(shear_w))

    and the column profile is u(r) = G / (4 * mu) * (R^2 - r^2).
    """

    def __init__(self, params: SimulationParameters,
                 severity_scale: float = SEVERITY_SCALE,
                 pulse: PulseTuning = PulseTuning()):
        self.params = params
        self.severity_scale = severity_scale
        self.mean_gradient = pulse.mean_gradient
        self.mu_plasma = plasma_viscosity(params.cholesterol)

    def solve_wall_shear(self, gradient: float, radius: float) -> Tuple[float, float]:
        """
        Find the self-consistent wall shear rate for one column.

        Args:
            gradient: Axial pressure gradient (Pa/m)
            radius: Local lumen radius (m)

        Returns:
            Tuple of (wall shear rate 1/s, effective viscosity Pa*s)
        """
        h = self.params.hct_fraction
        mu_p = self.mu_plasma
        drive = gradient * radius

        def error_func(shear):
            return 2.0 * shear * quemada_viscosity(shear, h, mu_p) - drive

        mu_inf = high_shear_viscosity(h, mu_p)
        upper = max(SHEAR_FLOOR * 2.0, drive / (2.0 * mu_inf))

        try:
            res = root_scalar(error_func, bracket=[SHEAR_FLOOR, upper], method='brentq')
            shear = res.root
        except ValueError:
            # No sign change: the closure is singular or the drive is tiny.
            if error_func(SHEAR_FLOOR) > 0:
                shear = SHEAR_FLOOR
            else:
                shear = upper
        return shear, quemada_viscosity(shear, h, mu_p)

    def profile(self, nr: int = NR, nz: int = NZ) -> np.ndarray:
        """
        Steady velocity field of shape (nr, nz) satisfying the wall and
        centreline conditions of the momentum solver.
        """
        rho = narrowing_profile(self.params.stenosis_severity, self.severity_scale, nz)
        field = np.zeros((nr, nz))
        index = np.arange(nr, dtype=float)

        for j in range(nz):
            radius = self.params.radius_m * rho[j]
            gradient = self.mean_gradient / rho[j] ** 4
            _, mu = self.solve_wall_shear(gradient, radius)
            r = index * radius / (nr - 1)
            field[:, j] = gradient / (4.0 * mu) * (radius ** 2 - r ** 2)

        field[-1] = 0.0
        field[0] = field[1]
        return field
