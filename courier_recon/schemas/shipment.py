"""Canonical shipment record shared by every stage after normalization."""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Carrier(str, enum.Enum):
    BLUEDART = "BlueDart"
    DELHIVERY = "Delhivery"


class WeightUnit(str, enum.Enum):
    GRAMS = "g"
    KILOGRAMS = "kg"


class NormalizedShipment(BaseModel):
    """One carrier billing line mapped onto the common schema.

    Instances are frozen. Stages that add information (outlier detection)
    return copies via ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    # Untouched source row, kept for traceability only
    original_data: dict[str, Any] = Field(default_factory=dict, repr=False)

    carrier: Carrier
    awb: str
    pickup_date: datetime
    origin: str = ""
    destination: str = ""
    pin: str = ""
    service: str = ""
    zone: str = "Unknown"
    status: str = ""

    actual_weight_kg: float = 0.0
    charged_weight_kg: float = 0.0
    pieces: int = 1
    line_amount: float = 0.0
    product_value: float = 0.0

    # Derived
    weight_diff_kg: float = 0.0
    weight_diff_percent: float = 0.0
    per_kg_rate: float = 0.0
    value_bucket: str = ""
    is_overbilled: bool = False
    is_underbilled: bool = False

    # Rule flags
    flag_high_uplift: bool = False
    flag_roundup_jump: bool = False
    flag_value_weight_mismatch: bool = False
    flag_missing_actual: bool = False
    # Set by the outlier detector
    flag_charge_outlier: bool = False
    flag_miscalculated: bool = False
