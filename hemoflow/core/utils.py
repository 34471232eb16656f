"""
Shared utility functions for hemoflow.
"""


def clamp(value: float, low: float, high: float) -> float:
    """
    Clamp value to the inclusive range [low, high].
    """
    if low > high:
        low, high = high, low
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    """
    Clamp value to the inclusive range [0.0, 1.0].
    """
    return clamp(value, 0.0, 1.0)


def grid_index(fraction: float, cells: int) -> int:
    """
    Map a normalized position in [0, 1] onto the nearest lower grid cell.
    """
    return min(int(clamp01(fraction) * (cells - 1)), cells - 1)
