from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ThresholdBand(BaseModel):
    """
    Warning / critical bounds for one water-quality parameter.

    A bound of None means the parameter is one-sided on that end.
    All comparisons are strict: a value sitting exactly on a bound
    does not trigger.
    """
    model_config = ConfigDict(frozen=True)

    unit: str = ""
    warning_low: Optional[float] = Field(default=None, description="Warn below this value")
    warning_high: Optional[float] = Field(default=None, description="Warn above this value")
    critical_low: Optional[float] = Field(default=None, description="Critical below this value")
    critical_high: Optional[float] = Field(default=None, description="Critical above this value")


# Downstream alerting depends on these exact numbers.
DEFAULT_THRESHOLDS: Dict[str, ThresholdBand] = {
    "ph": ThresholdBand(warning_low=6.0, warning_high=9.0, critical_low=5.5, critical_high=9.5),
    "tds": ThresholdBand(unit="ppm", warning_high=500, critical_high=1000),
    "turbidity": ThresholdBand(unit="NTU", warning_high=5, critical_high=10),
    "temperature": ThresholdBand(unit="°C", warning_low=10, warning_high=30, critical_low=5, critical_high=35),
    "nitrate": ThresholdBand(unit="mg/L", warning_high=10, critical_high=50),
    "fluoride": ThresholdBand(unit="mg/L", warning_high=1.5, critical_high=2.5),
    "arsenic": ThresholdBand(unit="mg/L", warning_high=0.01, critical_high=0.05),
    "lead": ThresholdBand(unit="mg/L", warning_high=0.01, critical_high=0.015),
    "iron": ThresholdBand(unit="mg/L", warning_high=0.3, critical_high=1),
}
