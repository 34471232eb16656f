import math

# Waves: (center_s, amplitude, width_s2) with pulse a*exp(-(t-c)^2/w)
# Centers are seconds into the beat, so the complex keeps its shape
# and only the isoelectric gap shrinks as HR rises.
_ECG_WAVES = (
    (0.10, 0.15, 0.001),    # P wave
    (0.18, -0.10, 0.0001),  # Q wave
    (0.20, 1.00, 0.0001),   # R wave
    (0.22, -0.25, 0.0001),  # S wave
    (0.45, 0.35, 0.002),    # T wave
)


def ecg_sample(time: float, hr: float) -> float:
    """
    Synthetic single-lead ECG sample at simulation time `time` (s).
    Illustrative Gaussian PQRST sum; deterministic in (time, hr).
    """
    period = 60.0 / hr
    local_t = time % period
    return sum(
        amplitude * math.exp(-((local_t - center) ** 2) / width)
        for center, amplitude, width in _ECG_WAVES
    )
