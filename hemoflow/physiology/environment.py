"""
Reference air-quality profiles per location.

Dust and chemical loads are dimensionless indices normalized downstream
by MetricTuning; avg_o2 / avg_co2 are population reference values kept
for display.
"""

from dataclasses import dataclass
from typing import Dict

from hemoflow.core.enums import AirQualityStatus


@dataclass(frozen=True)
class EnvironmentProfile:
    name: str = ""
    aqi: float = 0.0
    status: AirQualityStatus = AirQualityStatus.UNKNOWN
    dust: float = 0.0
    chemicals: float = 0.0
    avg_o2: float = 0.0
    avg_co2: float = 0.0


_G = AirQualityStatus.GOOD
_M = AirQualityStatus.MODERATE
_U = AirQualityStatus.UNHEALTHY
_VU = AirQualityStatus.VERY_UNHEALTHY
_H = AirQualityStatus.HAZARDOUS

ENVIRONMENT_PROFILES: Dict[str, EnvironmentProfile] = {
    p.name: p for p in (
        #                   name          aqi  status  dust  chem  O2   CO2
        EnvironmentProfile("Dhaka",       285, _VU,    180,  95,   245, 210),
        EnvironmentProfile("Delhi",       342, _H,     210,  115,  238, 205),
        EnvironmentProfile("Shanghai",    158, _U,     85,   60,   252, 215),
        EnvironmentProfile("London",      42,  _G,     12,   18,   265, 225),
        EnvironmentProfile("New York",    35,  _G,     9,    14,   268, 228),
        EnvironmentProfile("Tokyo",       38,  _G,     11,   16,   270, 230),
        EnvironmentProfile("Mexico City", 165, _U,     75,   65,   248, 212),
        EnvironmentProfile("Lagos",       182, _U,     140,  55,   242, 208),
        EnvironmentProfile("Cairo",       195, _U,     160,  58,   240, 206),
        EnvironmentProfile("Paris",       52,  _M,     18,   22,   262, 222),
    )
}

DEFAULT_PROFILE = EnvironmentProfile()


def get_environment(name: str) -> EnvironmentProfile:
    """Look up a profile; unknown names get the zero-valued default."""
    return ENVIRONMENT_PROFILES.get(name, DEFAULT_PROFILE)


def is_known_environment(name: str) -> bool:
    return name in ENVIRONMENT_PROFILES


def classify_aqi(aqi: float) -> AirQualityStatus:
    """Map an AQI value to its category."""
    if aqi <= 50:
        return AirQualityStatus.GOOD
    if aqi <= 100:
        return AirQualityStatus.MODERATE
    if aqi <= 200:
        return AirQualityStatus.UNHEALTHY
    if aqi <= 300:
        return AirQualityStatus.VERY_UNHEALTHY
    return AirQualityStatus.HAZARDOUS
