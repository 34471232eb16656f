"""
Physical and Numerical Constants for hemoflow.

This module centralizes the magic numbers used by the solver, the metrics
and the synthetic monitors.

NOTE: Only add constants here that are ACTIVELY IMPORTED elsewhere.
"""

from dataclasses import dataclass

# Grid resolution (cells).
NR = 30  # Radial
NZ = 80  # Axial

# Fluid properties.
RHO = 1060.0     # Blood density (kg/m^3)
MU_BASE = 0.0012  # Plasma viscosity (Pa*s)

# Time stepping.
# The explicit scheme was tuned at this DT and grid; changing either
# requires re-checking stability (no CFL check is made internally).
DT = 0.001  # seconds
SUBSTEPS_PER_TICK = 8

# Pulse wave velocity (m/s)
WAVE_VELOCITY = 7.5

# Reference cholesterol (mg/dL) for plasma viscosity and the risk index
CHOLESTEROL_REF = 180.0

# Shear floor for the viscosity closure (1/s)
SHEAR_FLOOR = 0.1

# Floor for the O2 denominator of the respiratory quotient
RQ_O2_FLOOR = 0.1

# Narrowing geometry: fraction of the lumen closed at 100% severity
SEVERITY_SCALE = 0.75

# History ring buffer.
HISTORY_LENGTH = 80
HISTORY_INTERVAL_STEPS = 40

# Tracer particles.
MAX_PARTICLES = 300
TRACER_GAIN = 0.08


@dataclass(frozen=True)
class QuemadaTuning:
    """Quemada intrinsic-viscosity constants."""
    k0: float = 4.08        # Zero-shear limit
    k_inf: float = 1.8      # High-shear limit
    shear_crit: float = 1.88  # Critical shear rate (1/s)


@dataclass(frozen=True)
class PulseTuning:
    """Oscillating axial pressure gradient G(t) = mean + amplitude*sin(wt)."""
    mean_gradient: float = 22.0
    amplitude: float = 20.0
    # Peak pressure proxy (mmHg) = baseline + G/2
    pressure_baseline: float = 90.0


@dataclass(frozen=True)
class MetricTuning:
    """Scaling constants for the derived physiological metrics."""
    # Environmental normalizers
    dust_norm: float = 200.0
    chemical_norm: float = 120.0
    aqi_norm: float = 400.0
    lung_efficiency_min: float = 0.4

    # Oxygen transport
    hb_o2_binding: float = 1.34   # mL O2 per g Hb
    extraction: float = 0.25
    rq_ratio: float = 0.85

    # Risk index references
    hct_ref: float = 45.0
    hr_ref: float = 70.0
    stenosis_threshold: float = 50.0
    stenosis_multiplier: float = 1.6
