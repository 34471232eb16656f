"""
Step Helper Methods Mixin for SimulationEngine.

This module contains the private _step_* methods that implement the
per-tick update logic. They are kept apart from the engine so the public
API (start/stop/reset/tick/snapshots) stays readable.
"""

from typing import TYPE_CHECKING, Optional

import numpy as np

from hemoflow.core.metrics import compute_result, to_history_point
from hemoflow.core.state import SimulationResult
from hemoflow.monitors.ecg import ecg_sample

if TYPE_CHECKING:
    from .engine import SimulationEngine


class StepHelpersMixin:
    """
    Mixin providing step helper methods for SimulationEngine.

    Per tick:
    - Momentum solver sub-steps (metrics recomputed each sub-step)
    - History sampling
    - Tracer advection
    """

    def _step_substep(self: "SimulationEngine") -> SimulationResult:
        """Advance the solver one sub-step and derive its metrics."""
        params = self.params
        step = self.solver.step(params, self._profile)
        time = self.solver.time
        return compute_result(
            step,
            params,
            self.environment,
            heartbeat=ecg_sample(time, params.hr),
            time=time,
        )

    def _step_solver(self: "SimulationEngine") -> Optional[SimulationResult]:
        """
        Run the configured number of sub-steps.
        Only the last sub-step's metrics survive the tick.
        """
        result = None
        for _ in range(self.config.substeps):
            result = self._step_substep()
        self._check_divergence()
        return result

    def _check_divergence(self: "SimulationEngine"):
        """Print a one-time note when the field first holds non-finite values."""
        if self._diverged or np.isfinite(self.solver.field).all():
            return
        self._diverged = True
        print(
            f"Note: velocity field diverged at t={self.solver.time:.3f}s; "
            "results are no longer finite"
        )

    def _step_history(self: "SimulationEngine", result: SimulationResult):
        """Sample the history buffer every `history_interval_steps` sub-steps."""
        interval = self.config.history_interval_steps
        if interval > 0 and self.solver.step_count % interval == 0:
            self.history.append(to_history_point(result))

    def _step_tracers(self: "SimulationEngine"):
        self.tracers.step(self.solver.field, self._profile, running=self.running)

    def _publish(self: "SimulationEngine", result: SimulationResult):
        self.latest_result = result
        self._step_history(result)
        if self.recorder:
            self.recorder.log(result)
