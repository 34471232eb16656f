"""
Shear-thinning blood viscosity (Quemada closure).

mu_eff = mu_plasma * (1 - 0.5 * k(shear) * h)^-2
k(shear) = (k0 + k_inf * sqrt(shear/shear_c)) / (1 + sqrt(shear/shear_c))

Reference:
    Quemada. Rheol Acta. 1978.
"""

import numpy as np

from hemoflow.core.constants import MU_BASE, CHOLESTEROL_REF, SHEAR_FLOOR, QuemadaTuning

_QUEMADA = QuemadaTuning()


def plasma_viscosity(cholesterol: float, mu_base: float = MU_BASE) -> float:
    """Plasma viscosity (Pa*s) adjusted linearly by cholesterol deviation from 180 mg/dL."""
    return mu_base * (1.0 + (cholesterol - CHOLESTEROL_REF) / 1000.0)


def quemada_intrinsic(shear, tuning: QuemadaTuning = _QUEMADA):
    """Intrinsic viscosity k(shear); shear is floored at SHEAR_FLOOR."""
    g = np.maximum(np.abs(shear), SHEAR_FLOOR)
    root = np.sqrt(g / tuning.shear_crit)
    return (tuning.k0 + tuning.k_inf * root) / (1.0 + root)


def quemada_viscosity(shear, hct_fraction: float, mu_plasma: float,
                      tuning: QuemadaTuning = _QUEMADA):
    """
    Effective viscosity (Pa*s) for a scalar or an array of shear rates.

    Args:
        shear: Local shear rate estimate |du/dr| (1/s)
        hct_fraction: Hematocrit as a fraction (0-1)
        mu_plasma: Plasma viscosity (Pa*s)
    """
    k = quemada_intrinsic(shear, tuning)
    mu = mu_plasma * (1.0 - 0.5 * k * hct_fraction) ** -2
    if np.ndim(mu) == 0:
        return float(mu)
    return mu


def high_shear_viscosity(hct_fraction: float, mu_plasma: float,
                         tuning: QuemadaTuning = _QUEMADA) -> float:
    """Limit of quemada_viscosity as shear -> infinity."""
    return mu_plasma * (1.0 - 0.5 * tuning.k_inf * hct_fraction) ** -2
