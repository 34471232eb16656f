"""
Derived physiological and environmental metrics.

Everything here is a pure function of the solver output, the parameters
and the environment profile.
"""

from typing import Iterable

import numpy as np

from hemoflow.core.constants import (
    WAVE_VELOCITY, RQ_O2_FLOOR, CHOLESTEROL_REF, MetricTuning, PulseTuning
)
from hemoflow.core.state import SimulationParameters, SimulationResult, HistoryPoint
from hemoflow.physiology.environment import EnvironmentProfile
from hemoflow.physiology.momentum import SolverStep

_METRICS = MetricTuning()
_PULSE = PulseTuning()


def wavelength(hr: float) -> float:
    """Pulse wavelength (m) = wave speed / heart frequency."""
    return WAVE_VELOCITY / (hr / 60.0)


def pollutant_load(dust: float, chemicals: float, aqi: float,
                   tuning: MetricTuning = _METRICS) -> float:
    return (dust / tuning.dust_norm + chemicals / tuning.chemical_norm + aqi / tuning.aqi_norm) / 3.0


def lung_efficiency(load: float, tuning: MetricTuning = _METRICS) -> float:
    return max(tuning.lung_efficiency_min, 1.0 - load)


def flow_rate_l_min(volumetric_flow: float) -> float:
    """m^3/s -> L/min."""
    return volumetric_flow * 1000.0 * 60.0


def o2_consumption(flow_rate: float, hct: float, lung_eff: float,
                   tuning: MetricTuning = _METRICS) -> float:
    return flow_rate * (hct / 100.0) * tuning.hb_o2_binding * tuning.extraction * lung_eff


def co2_production(o2: float, tuning: MetricTuning = _METRICS) -> float:
    return tuning.rq_ratio * o2


def respiratory_quotient(co2: float, o2: float) -> float:
    return co2 / max(RQ_O2_FLOOR, o2)


def stenosis_multiplier(severity: float, tuning: MetricTuning = _METRICS) -> float:
    return tuning.stenosis_multiplier if severity > tuning.stenosis_threshold else 1.0


def risk_index(params: SimulationParameters, load: float,
               tuning: MetricTuning = _METRICS) -> float:
    """Composite cardiovascular risk index (1.0 = reference adult)."""
    return (
        (params.hct / tuning.hct_ref)
        * (params.hr / tuning.hr_ref)
        * (params.cholesterol / CHOLESTEROL_REF)
        * stenosis_multiplier(params.stenosis_severity, tuning)
        * (1.0 + load)
    )


def wall_stress(mu_plasma: float, max_shear: float) -> float:
    return mu_plasma * max_shear


def peak_pressure(gradient: float, tuning: PulseTuning = _PULSE) -> float:
    return tuning.pressure_baseline + gradient / 2.0


def compute_result(step: SolverStep, params: SimulationParameters,
                   environment: EnvironmentProfile, heartbeat: float,
                   time: float) -> SimulationResult:
    """
    Assemble the metrics snapshot for one solver sub-step.

    Args:
        step: Solver output for the sub-step
        params: Parameters in force during the sub-step
        environment: Profile for params.environment
        heartbeat: ECG sample at `time`
        time: Simulation time after the sub-step (s)
    """
    load = pollutant_load(environment.dust, environment.chemicals, params.aqi)
    lung_eff = lung_efficiency(load)
    flow = flow_rate_l_min(step.volumetric_flow)
    o2 = o2_consumption(flow, params.hct, lung_eff)

    return SimulationResult(
        max_velocity=step.max_velocity,
        pressure_gradient=step.pressure_gradient,
        max_shear=step.max_shear,
        wavelength=wavelength(params.hr),
        o2_consumption=o2,
        co2_production=co2_production(o2),
        time=time,
        risk_index=risk_index(params, load),
        wall_stress=wall_stress(step.plasma_viscosity, step.max_shear),
        peak_pressure=peak_pressure(step.pressure_gradient),
        heartbeat=heartbeat,
        lung_efficiency=lung_eff,
        pollutant_load=load,
        flow_rate=flow,
    )


def to_history_point(result: SimulationResult) -> HistoryPoint:
    return HistoryPoint(
        time=result.time,
        pressure=result.pressure_gradient,
        rq=respiratory_quotient(result.co2_production, result.o2_consumption),
        heartbeat=result.heartbeat,
        pollutant_load=result.pollutant_load,
        lung_stress=1.0 - result.lung_efficiency,
        risk_index=result.risk_index,
        flow_rate=result.flow_rate,
    )


def summarize_history(points: Iterable[HistoryPoint]) -> dict:
    """
    Summary statistics over a history buffer.

    Returns:
        dict: {<field>: {"mean", "min", "max"}} for flow_rate, risk_index,
        pressure and rq. All zeros when the buffer is empty.
    """
    points = list(points)
    keys = ("flow_rate", "risk_index", "pressure", "rq")
    if not points:
        return {k: {"mean": 0.0, "min": 0.0, "max": 0.0} for k in keys}

    summary = {}
    for key in keys:
        arr = np.array([getattr(p, key) for p in points], dtype=float)
        summary[key] = {
            "mean": float(np.mean(arr)),
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
        }
    return summary
