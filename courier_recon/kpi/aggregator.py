"""KPI aggregation over the final, flagged shipment list."""

import logging
from collections.abc import Callable, Sequence

from courier_recon.logging_config import log_event
from courier_recon.schemas.kpi import KPISummary, ProblemPin
from courier_recon.schemas.shipment import NormalizedShipment

logger = logging.getLogger("courier_recon.kpi.aggregator")


def overbilling_rate_by(
    shipments: Sequence[NormalizedShipment],
    key: Callable[[NormalizedShipment], str],
) -> dict[str, float]:
    """Percentage of overbilled shipments per key value."""
    totals: dict[str, list[int]] = {}
    for s in shipments:
        counts = totals.setdefault(key(s), [0, 0])
        counts[0] += 1
        if s.is_overbilled:
            counts[1] += 1
    return {name: overbilled / total * 100 for name, (total, overbilled) in totals.items()}


def top_problematic_pins(
    overbilled: Sequence[NormalizedShipment],
    limit: int = 10,
) -> list[ProblemPin]:
    """Rank PINs by overbilled shipment count; ties keep first-seen order."""
    pins: dict[str, ProblemPin] = {}
    for s in overbilled:
        entry = pins.get(s.pin)
        if entry is None:
            pins[s.pin] = ProblemPin(pin=s.pin, count=1, total_value=s.line_amount)
        else:
            entry.count += 1
            entry.total_value += s.line_amount
    ranked = sorted(pins.values(), key=lambda p: p.count, reverse=True)
    return ranked[:limit]


def calculate_kpis(
    shipments: Sequence[NormalizedShipment],
    top_pins_limit: int = 10,
) -> KPISummary:
    """Aggregate headline KPIs over the flagged shipment list.

    Args:
        shipments: Shipments after outlier detection.
        top_pins_limit: Number of problem PINs to keep.

    Returns:
        KPISummary. All zeros for an empty input.
    """
    if not shipments:
        return KPISummary()

    overbilled = [s for s in shipments if s.is_overbilled]
    weighed = [s for s in shipments if s.actual_weight_kg > 0 and s.charged_weight_kg > 0]

    summary = KPISummary(
        total_shipments=len(shipments),
        total_amount=sum(s.line_amount for s in shipments),
        suspected_overbilling_count=len(overbilled),
        suspected_overbilling_value=sum(s.line_amount for s in overbilled),
        avg_actual_weight=(
            sum(s.actual_weight_kg for s in weighed) / len(weighed) if weighed else 0.0
        ),
        avg_charged_weight=(
            sum(s.charged_weight_kg for s in weighed) / len(weighed) if weighed else 0.0
        ),
        overbilling_rate_by_carrier=overbilling_rate_by(shipments, lambda s: s.carrier.value),
        overbilling_rate_by_zone=overbilling_rate_by(shipments, lambda s: s.zone),
        top_problematic_pins=top_problematic_pins(overbilled, top_pins_limit),
    )

    log_event(
        logger,
        "calculate_kpis",
        total_shipments=summary.total_shipments,
        total_amount=round(summary.total_amount, 2),
        overbilled=summary.suspected_overbilling_count,
    )
    return summary
