"""
Stenosis geometry: parabolic narrowing centred on the middle of the segment.
"""

import numpy as np

from hemoflow.core.constants import NZ, SEVERITY_SCALE


def narrowing_factor(j: float, severity: float, scale: float = SEVERITY_SCALE,
                     nz: int = NZ) -> float:
    """
    Local radius-scale factor rho(j) for axial cell j.

    Args:
        j: Axial cell index
        severity: Stenosis severity (% area reduction, 0-85)
        scale: Fraction of the radius removed at 100% severity
        nz: Number of axial cells; the constriction spans the middle half

    Returns:
        1.0 outside the constriction, down to 1 - severity/100*scale at the centre.
        Not clamped: pathological severities can drive this to zero or below.
    """
    center = nz / 2
    half_width = nz / 4
    dist = abs(j - center)
    if dist > half_width:
        return 1.0
    severity_factor = (severity / 100.0) * scale
    return 1.0 - severity_factor * (1.0 - (dist / half_width) ** 2)


def narrowing_profile(severity: float, scale: float = SEVERITY_SCALE, nz: int = NZ) -> np.ndarray:
    """Vectorized narrowing_factor over every axial cell."""
    j = np.arange(nz, dtype=float)
    center = nz / 2
    half_width = nz / 4
    dist = np.abs(j - center)
    severity_factor = (severity / 100.0) * scale
    profile = 1.0 - severity_factor * (1.0 - (dist / half_width) ** 2)
    return np.where(dist > half_width, 1.0, profile)


def is_degenerate(profile: np.ndarray) -> bool:
    """True if any factor is non-positive (G/rho^4 would diverge)."""
    return bool(np.any(profile <= 0.0))
