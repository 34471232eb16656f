import csv
import os
import time
from dataclasses import asdict, fields

import pandas as pd

from .state import SimulationResult


class DataRecorder:
    """
    Records published simulation results to CSV.
    """
    def __init__(self, output_dir: str = ".", sample_interval_sec: float = 0.0):
        self.output_dir = output_dir
        self.filename = f"hemoflow_log_{int(time.time())}.csv"
        self.file_path = os.path.join(output_dir, self.filename)
        self.file = None
        self.writer = None
        self.is_recording = False
        self.sample_interval_sec = max(0.0, sample_interval_sec)
        self._last_sample_time = None
        self.rows_written = 0

    def start(self):
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            self.file = open(self.file_path, 'w', newline='')
            self.writer = csv.writer(self.file)
            self.is_recording = True
            # Header based on SimulationResult dataclass fields.
            self.writer.writerow([f.name for f in fields(SimulationResult)])
        except OSError as e:
            print(f"Failed to start recording: {e}")
            self.is_recording = False

    def log(self, result: SimulationResult):
        if not self.is_recording or not self.writer:
            return

        if self.sample_interval_sec > 0.0:
            now = result.time
            if self._last_sample_time is not None and (now - self._last_sample_time) < self.sample_interval_sec:
                return
            self._last_sample_time = now

        self.writer.writerow(list(asdict(result).values()))
        self.rows_written += 1

    def stop(self):
        if self.file:
            self.file.close()
            self.file = None
        self.writer = None
        self.is_recording = False


def load_recording(path: str) -> pd.DataFrame:
    """Load a recorder CSV for analysis, indexed by simulation time."""
    df = pd.read_csv(path)
    return df.set_index("time")
