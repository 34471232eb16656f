from enum import Enum

class AirQualityStatus(Enum):
    """US EPA air quality categories"""
    UNKNOWN = "Unknown"
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"


class FlowMode(Enum):
    """Initial condition of the velocity field"""
    REST = "rest"
    STEADY_STATE = "steady_state"
