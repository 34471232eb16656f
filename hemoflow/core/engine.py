from collections import deque
from dataclasses import asdict
from typing import List, Optional
import json

import numpy as np

from .state import (
    SimulationConfig, SimulationParameters, SimulationResult, HistoryPoint, FieldSnapshot
)
from .step_helpers import StepHelpersMixin
from .enums import FlowMode
from .recorder import DataRecorder
from .equilibrium import SteadyFlowSolver
from hemoflow.physiology.environment import get_environment, is_known_environment
from hemoflow.physiology.geometry import narrowing_profile, is_degenerate
from hemoflow.physiology.momentum import MomentumSolver
from hemoflow.monitors.tracers import TracerCloud


class SimulationEngine(StepHelpersMixin):
    """
    Main simulation orchestrator.
    Owns the velocity field, clock, tracers and history, and produces a
    result snapshot per tick.

    State management:
    - The solver owns the field and clock; nothing outside tick() mutates them.
    - Renderers get copies via get_field_snapshot(), never live arrays.
    - One engine has one writer: whoever calls tick(). Not thread-safe.
    """
    def __init__(self, params: Optional[SimulationParameters] = None,
                 config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()
        if self.config.substeps <= 0:
            raise ValueError(f"substeps must be positive, got {self.config.substeps}")
        self.mode = FlowMode(self.config.mode)

        # Random source for tracer spawns (seeded for reproducible runs).
        self.rng = np.random.default_rng(self.config.rng_seed)

        self.solver = MomentumSolver(
            dt=self.config.dt,
            severity_scale=self.config.severity_scale,
        )
        self.tracers = TracerCloud(
            max_particles=self.config.max_particles,
            gain=self.config.tracer_gain,
            rng=self.rng,
        )

        # Output buffer (ring buffer for charts).
        self.history = deque(maxlen=self.config.history_length)
        self.latest_result: Optional[SimulationResult] = None

        self.recorder: Optional[DataRecorder] = None

        # Control flags.
        self.running = False

        self._warned_environments = set()
        self._diverged = False
        self.params = None
        self.environment = None
        self._profile = None
        self.set_parameters(params or SimulationParameters())

        self.initialize_state()

    def initialize_state(self):
        """Set the initial field based on config mode."""
        if self.mode == FlowMode.STEADY_STATE:
            self.prime_steady_state()

    def prime_steady_state(self):
        """Load the steady Poiseuille profile for the current parameters at t = 0."""
        steady = SteadyFlowSolver(self.params, severity_scale=self.config.severity_scale)
        self.solver.load(steady.profile(self.solver.nr, self.solver.nz), 0.0, 0)
        self._diverged = False

    def set_parameters(self, params: SimulationParameters):
        """Replace the parameter set; takes effect on the next sub-step."""
        self.params = params
        self.environment = get_environment(params.environment)
        if not is_known_environment(params.environment) and params.environment not in self._warned_environments:
            self._warned_environments.add(params.environment)
            print(f"Note: environment '{params.environment}' not recognized, using zero pollutant load")

        self._profile = narrowing_profile(
            params.stenosis_severity, self.config.severity_scale, self.solver.nz
        )
        if is_degenerate(self._profile):
            print(
                f"Warning: stenosis severity {params.stenosis_severity}% closes the lumen; "
                "local pressure gradient will diverge"
            )

    def update_parameters(self, **changes):
        """Convenience wrapper: set_parameters(params.replace(**changes))."""
        self.set_parameters(self.params.replace(**changes))

    def start(self):
        """Start the simulation loop."""
        self.running = True

    def stop(self):
        """Stop the simulation."""
        self.running = False

    def reset(self):
        """
        Halt and zero the field and clock, then clear tracers, history and the
        latest result. Steady-state mode is not re-primed; call
        prime_steady_state() for that.
        """
        self.running = False
        self.solver.clear()
        self.tracers.clear()
        self.history.clear()
        self.latest_result = None
        self._diverged = False

    def tick(self) -> Optional[SimulationResult]:
        """
        One externally scheduled frame.

        While running, advances the solver `config.substeps` sub-steps and
        publishes the final sub-step's result. Tracers spawn every tick and
        only move while running.
        """
        if self.running:
            result = self._step_solver()
            if result is not None:
                self._publish(result)
        self._step_tracers()
        return self.latest_result

    @property
    def time(self) -> float:
        return self.solver.time

    @property
    def particle_count(self) -> int:
        return len(self.tracers)

    def get_latest_result(self) -> Optional[SimulationResult]:
        """Return the most recent result snapshot (None before the first tick)."""
        return self.latest_result

    def get_history(self) -> List[HistoryPoint]:
        """Oldest-first copy of the history buffer."""
        return list(self.history)

    def get_field_snapshot(self) -> FieldSnapshot:
        """Read-only copy of the field, narrowing profile and particles."""
        velocity = self.solver.field.copy()
        velocity.setflags(write=False)
        narrowing = self._profile.copy()
        narrowing.setflags(write=False)
        return FieldSnapshot(
            velocity=velocity,
            narrowing=narrowing,
            particles=self.tracers.positions(),
            time=self.solver.time,
        )

    # Checkpointing.

    def export_checkpoint(self) -> dict:
        """JSON-safe dict of parameters, field and clock."""
        return {
            "params": asdict(self.params),
            "field": self.solver.field.tolist(),
            "time": self.solver.time,
            "step_count": self.solver.step_count,
        }

    @classmethod
    def from_checkpoint(cls, data: dict,
                        config: Optional[SimulationConfig] = None) -> "SimulationEngine":
        """
        Rebuild an engine from export_checkpoint() output.
        Ticking it reproduces the uninterrupted field exactly (tracers excepted).
        """
        params = SimulationParameters(**data["params"])
        engine = cls(params, config)
        engine.solver.load(data["field"], data["time"], data.get("step_count"))
        return engine

    def save_checkpoint(self, path: str):
        with open(path, 'w') as f:
            json.dump(self.export_checkpoint(), f)

    @classmethod
    def load_checkpoint(cls, path: str,
                        config: Optional[SimulationConfig] = None) -> "SimulationEngine":
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_checkpoint(data, config)

    # Recording.

    def start_recording(self, output_dir: str = ".", sample_interval_sec: float = 0.0):
        self.recorder = DataRecorder(output_dir=output_dir, sample_interval_sec=sample_interval_sec)
        self.recorder.start()

    def stop_recording(self):
        if self.recorder:
            self.recorder.stop()
        self.recorder = None
