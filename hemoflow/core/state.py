from dataclasses import dataclass, field, replace as dc_replace
from typing import Optional, Tuple

import numpy as np

from hemoflow.core.constants import (
    DT, SUBSTEPS_PER_TICK, HISTORY_LENGTH, HISTORY_INTERVAL_STEPS,
    MAX_PARTICLES, TRACER_GAIN, SEVERITY_SCALE, RQ_O2_FLOOR,
)


@dataclass
class SimulationConfig:
    """Configuration for the simulation engine."""
    dt: float = DT  # Sub-step in seconds
    substeps: int = SUBSTEPS_PER_TICK  # Solver sub-steps per tick

    mode: str = "rest"  # 'rest' (zero field) or 'steady_state' (Poiseuille primed)

    # History ring buffer.
    history_length: int = HISTORY_LENGTH
    history_interval_steps: int = HISTORY_INTERVAL_STEPS

    # Tracers.
    max_particles: int = MAX_PARTICLES
    tracer_gain: float = TRACER_GAIN

    # Narrowing geometry.
    severity_scale: float = SEVERITY_SCALE

    rng_seed: Optional[int] = None


@dataclass(frozen=True)
class SimulationParameters:
    """
    User-editable inputs. Read-only to the core; replace wholesale to change.
    """
    hct: float = 45.0            # Hematocrit (%)
    hr: float = 72.0             # Heart rate (bpm)
    cholesterol: float = 180.0   # Total cholesterol (mg/dL)
    vessel_radius: float = 2.5   # Radius at rest (mm)
    aqi: float = 45.0            # Air quality index
    environment: str = "London"  # Environment profile identifier
    stenosis_severity: float = 0.0  # Area reduction (%)

    @property
    def radius_m(self) -> float:
        return self.vessel_radius / 1000.0

    @property
    def hct_fraction(self) -> float:
        return self.hct / 100.0

    def replace(self, **changes) -> "SimulationParameters":
        return dc_replace(self, **changes)


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Immutable snapshot of the derived metrics at the end of a tick."""
    max_velocity: float = 0.0       # m/s
    pressure_gradient: float = 0.0  # G(t)
    max_shear: float = 0.0          # 1/s
    wavelength: float = 0.0         # m
    o2_consumption: float = 0.0
    co2_production: float = 0.0
    time: float = 0.0               # s
    risk_index: float = 0.0
    wall_stress: float = 0.0        # Pa
    peak_pressure: float = 90.0     # mmHg proxy
    heartbeat: float = 0.0          # ECG sample
    lung_efficiency: float = 1.0
    pollutant_load: float = 0.0
    flow_rate: float = 0.0          # L/min

    @property
    def respiratory_quotient(self) -> float:
        return self.co2_production / max(RQ_O2_FLOOR, self.o2_consumption)


@dataclass(frozen=True)
class HistoryPoint:
    """Reduced projection of SimulationResult kept for charting."""
    time: float
    pressure: float
    rq: float
    heartbeat: float
    pollutant_load: float
    lung_stress: float
    risk_index: float
    flow_rate: float


@dataclass
class Tracer:
    """Massless visualization particle in normalized (z, r) coordinates."""
    z: float
    r: float


@dataclass(frozen=True)
class FieldSnapshot:
    """
    Read-only view handed to renderers once per tick.
    Arrays are copies with the write flag cleared.
    """
    velocity: np.ndarray
    narrowing: np.ndarray
    particles: Tuple[Tuple[float, float], ...] = field(default_factory=tuple)
    time: float = 0.0
