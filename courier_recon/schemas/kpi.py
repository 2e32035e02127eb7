"""Pydantic schemas for KPI aggregation."""

from pydantic import BaseModel, Field


class ProblemPin(BaseModel):
    pin: str
    count: int
    total_value: float


class KPISummary(BaseModel):
    total_shipments: int = 0
    total_amount: float = 0.0
    suspected_overbilling_count: int = 0
    suspected_overbilling_value: float = 0.0
    avg_actual_weight: float = 0.0
    avg_charged_weight: float = 0.0
    overbilling_rate_by_carrier: dict[str, float] = Field(default_factory=dict)
    overbilling_rate_by_zone: dict[str, float] = Field(default_factory=dict)
    top_problematic_pins: list[ProblemPin] = Field(default_factory=list)
