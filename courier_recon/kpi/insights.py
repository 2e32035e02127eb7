"""Rule-based recommendations drawn from the flagged shipments and KPIs.

No side effects, easy to unit test.
"""

import enum
from collections.abc import Sequence

from pydantic import BaseModel, Field

from courier_recon.schemas.kpi import KPISummary
from courier_recon.schemas.shipment import NormalizedShipment


class RecommendationSeverity(str, enum.Enum):
    CRITICAL = "critical"
    WARNING = "warning"


class Recommendation(BaseModel):
    severity: RecommendationSeverity
    title: str
    description: str
    action: str


class InsightReport(BaseModel):
    dispute_rate: float = 0.0
    avg_overbilling: float = 0.0
    recommendations: list[Recommendation] = Field(default_factory=list)


def carrier_dispute_rates(shipments: Sequence[NormalizedShipment]) -> dict[str, float]:
    totals: dict[str, list[int]] = {}
    for s in shipments:
        counts = totals.setdefault(s.carrier.value, [0, 0])
        counts[0] += 1
        if s.flag_miscalculated:
            counts[1] += 1
    return {carrier: disputes / total * 100 for carrier, (total, disputes) in totals.items()}


def generate_insights(
    shipments: Sequence[NormalizedShipment],
    kpis: KPISummary,
    *,
    dispute_rate_threshold: float = 15.0,
    avg_overbilling_threshold: float = 50.0,
    carrier_dispute_rate_threshold: float = 20.0,
) -> InsightReport:
    if not shipments:
        return InsightReport()

    disputes = sum(1 for s in shipments if s.flag_miscalculated)
    dispute_rate = disputes / len(shipments) * 100
    avg_overbilling = (
        kpis.suspected_overbilling_value / kpis.suspected_overbilling_count
        if kpis.suspected_overbilling_count
        else 0.0
    )

    recommendations: list[Recommendation] = []

    if dispute_rate > dispute_rate_threshold:
        recommendations.append(Recommendation(
            severity=RecommendationSeverity.CRITICAL,
            title="High Dispute Rate Detected",
            description=f"{dispute_rate:.1f}% of shipments have billing issues. Immediate review recommended.",
            action="Review weight measurement processes and carrier agreements.",
        ))

    if avg_overbilling > avg_overbilling_threshold:
        recommendations.append(Recommendation(
            severity=RecommendationSeverity.WARNING,
            title="Significant Overbilling Impact",
            description=f"Average overbilling of ₹{avg_overbilling:.0f} per disputed shipment.",
            action="Negotiate better rate structures with carriers.",
        ))

    for carrier, rate in carrier_dispute_rates(shipments).items():
        if rate > carrier_dispute_rate_threshold:
            recommendations.append(Recommendation(
                severity=RecommendationSeverity.WARNING,
                title=f"{carrier} Performance Issue",
                description=f"{rate:.1f}% dispute rate with {carrier}.",
                action=f"Review {carrier} billing practices and consider alternative carriers.",
            ))

    return InsightReport(
        dispute_rate=dispute_rate,
        avg_overbilling=avg_overbilling,
        recommendations=recommendations,
    )
