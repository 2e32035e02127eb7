"""Breakdowns behind the dashboard charts. Data only, no rendering."""

from collections.abc import Callable, Sequence

from pydantic import BaseModel, Field

from courier_recon.schemas.shipment import NormalizedShipment

# (label, inclusive upper bound on charged weight in kg)
WEIGHT_BUCKETS: list[tuple[str, float]] = [
    ("0-0.5kg", 0.5),
    ("0.5-1kg", 1.0),
    ("1-2kg", 2.0),
    ("2-5kg", 5.0),
    ("5kg+", float("inf")),
]


class ShareEntry(BaseModel):
    name: str
    value: int
    percentage: float


class ChargeStats(BaseModel):
    total_amount: float = 0.0
    total_weight: float = 0.0
    shipment_count: int = 0
    avg_rate: float = 0.0


class CarrierChargeStats(ChargeStats):
    zones: dict[str, ChargeStats] = Field(default_factory=dict)


class DailyTrend(BaseModel):
    date: str
    shipments: int
    amount: float
    disputes: int
    avg_weight: float
    dispute_rate: float


def _percentage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def distribution(
    shipments: Sequence[NormalizedShipment],
    key: Callable[[NormalizedShipment], str],
) -> list[ShareEntry]:
    """Count shipments per key value, in first-seen order."""
    counts: dict[str, int] = {}
    for s in shipments:
        name = key(s)
        counts[name] = counts.get(name, 0) + 1
    return [
        ShareEntry(name=name, value=count, percentage=_percentage(count, len(shipments)))
        for name, count in counts.items()
    ]


def carrier_distribution(shipments: Sequence[NormalizedShipment]) -> list[ShareEntry]:
    return distribution(shipments, lambda s: s.carrier.value)


def zone_distribution(shipments: Sequence[NormalizedShipment]) -> list[ShareEntry]:
    return distribution(shipments, lambda s: s.zone)


def weight_distribution(shipments: Sequence[NormalizedShipment]) -> list[ShareEntry]:
    if not shipments:
        return []
    counts = {label: 0 for label, _ in WEIGHT_BUCKETS}
    for s in shipments:
        for label, upper in WEIGHT_BUCKETS:
            if s.charged_weight_kg <= upper:
                counts[label] += 1
                break
    return [
        ShareEntry(name=label, value=count, percentage=_percentage(count, len(shipments)))
        for label, count in counts.items()
    ]


def _add(stats: ChargeStats, shipment: NormalizedShipment) -> None:
    stats.total_amount += shipment.line_amount
    stats.total_weight += shipment.charged_weight_kg
    stats.shipment_count += 1


def _finish(stats: ChargeStats) -> None:
    stats.avg_rate = stats.total_amount / stats.total_weight if stats.total_weight > 0 else 0.0


def charge_analysis(shipments: Sequence[NormalizedShipment]) -> dict[str, CarrierChargeStats]:
    """Amount, charged weight and blended rate per carrier, and per zone within it."""
    carriers: dict[str, CarrierChargeStats] = {}
    for s in shipments:
        carrier = carriers.setdefault(s.carrier.value, CarrierChargeStats())
        _add(carrier, s)
        _add(carrier.zones.setdefault(s.zone, ChargeStats()), s)

    for carrier in carriers.values():
        _finish(carrier)
        for zone in carrier.zones.values():
            _finish(zone)
    return carriers


def daily_trends(shipments: Sequence[NormalizedShipment]) -> list[DailyTrend]:
    days: dict[str, list[float]] = {}
    for s in shipments:
        # shipments, amount, disputes, total charged weight
        day = days.setdefault(s.pickup_date.strftime("%Y-%m-%d"), [0, 0.0, 0, 0.0])
        day[0] += 1
        day[1] += s.line_amount
        day[2] += 1 if s.flag_miscalculated else 0
        day[3] += s.charged_weight_kg

    return [
        DailyTrend(
            date=date,
            shipments=int(count),
            amount=amount,
            disputes=int(disputes),
            avg_weight=weight / count,
            dispute_rate=disputes / count * 100,
        )
        for date, (count, amount, disputes, weight) in sorted(days.items())
    ]
