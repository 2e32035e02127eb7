"""Dashboard filtering over the final shipment list."""

from collections.abc import Sequence
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from courier_recon.schemas.shipment import NormalizedShipment


class ShipmentFilters(BaseModel):
    """Filter criteria. Empty lists and ``None`` bounds mean no restriction."""

    start: datetime | None = None
    end: datetime | None = None
    carriers: list[str] = Field(default_factory=list)
    zones: list[str] = Field(default_factory=list)
    pins: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)
    min_weight_diff: float | None = None
    delivered_only: bool = False
    flagged_only: bool = False
    search_text: str = ""

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class FacetValues(BaseModel):
    carriers: list[str] = Field(default_factory=list)
    zones: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)


def matches(shipment: NormalizedShipment, filters: ShipmentFilters) -> bool:
    if filters.start is not None and shipment.pickup_date < filters.start:
        return False
    if filters.end is not None and shipment.pickup_date > filters.end:
        return False
    if filters.carriers and shipment.carrier.value not in filters.carriers:
        return False
    if filters.zones and shipment.zone not in filters.zones:
        return False
    if filters.pins and not any(pin in shipment.pin for pin in filters.pins):
        return False
    if filters.services and shipment.service not in filters.services:
        return False
    if filters.statuses and shipment.status not in filters.statuses:
        return False
    if filters.min_weight_diff is not None and shipment.weight_diff_kg < filters.min_weight_diff:
        return False
    if filters.delivered_only and "deliver" not in shipment.status.lower():
        return False
    if filters.flagged_only and not shipment.flag_miscalculated:
        return False
    if filters.search_text:
        haystack = f"{shipment.awb} {shipment.pin} {shipment.destination} {shipment.origin}".lower()
        if filters.search_text.lower() not in haystack:
            return False
    return True


def apply_filters(
    shipments: Sequence[NormalizedShipment],
    filters: ShipmentFilters,
) -> list[NormalizedShipment]:
    return [s for s in shipments if matches(s, filters)]


def facet_values(shipments: Sequence[NormalizedShipment]) -> FacetValues:
    """Distinct values available to each list filter, sorted."""
    return FacetValues(
        carriers=sorted({s.carrier.value for s in shipments}),
        zones=sorted({s.zone for s in shipments}),
        services=sorted({s.service for s in shipments}),
        statuses=sorted({s.status for s in shipments}),
    )
