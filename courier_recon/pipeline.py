"""
Reconciliation pipeline.

Takes the parsed rows of a BlueDart export and a Delhivery export and produces
the flagged canonical shipment list plus KPIs:

1. Normalize BlueDart rows
2. Normalize Delhivery rows
3. Combine (BlueDart first)
4. Detect per-kg rate outliers across the combined set
5. Aggregate KPIs
6. Derive recommendations
"""

import enum
import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from courier_recon.anomaly_flagger.detectors import detect_outliers
from courier_recon.config import Settings
from courier_recon.kpi.aggregator import calculate_kpis
from courier_recon.kpi.insights import InsightReport, generate_insights
from courier_recon.logging_config import log_event
from courier_recon.normalizers.bluedart import normalize_bluedart
from courier_recon.normalizers.delhivery import normalize_delhivery
from courier_recon.normalizers.validation import (
    validate_bluedart_columns,
    validate_delhivery_columns,
)
from courier_recon.schemas.kpi import KPISummary
from courier_recon.schemas.shipment import NormalizedShipment

logger = logging.getLogger("courier_recon.pipeline")

RawRows = Sequence[Mapping[str, Any]]


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass
class PipelineStep:
    name: str
    status: StepStatus = StepStatus.PENDING
    details: str = ""


@dataclass
class ReconciliationResult:
    """Complete result of one reconciliation run."""

    shipments: list[NormalizedShipment] = field(default_factory=list)
    kpis: KPISummary = field(default_factory=KPISummary)
    insights: InsightReport = field(default_factory=InsightReport)
    steps: list[PipelineStep] = field(default_factory=list)
    processing_time_ms: int = 0

    @property
    def flagged(self) -> list[NormalizedShipment]:
        return [s for s in self.shipments if s.flag_miscalculated]


class ReconciliationPipeline:
    """Runs normalization, outlier detection and KPI aggregation as one batch."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def run(
        self,
        bluedart_rows: RawRows = (),
        delhivery_rows: RawRows = (),
        *,
        validate: bool = False,
    ) -> ReconciliationResult:
        """Run the full pass. Nothing is returned until every stage has finished.

        With ``validate=True`` each non-empty batch is checked for its required
        columns first and ``MissingColumnsError`` is raised before any work.
        """
        start = time.perf_counter()

        if validate:
            if bluedart_rows:
                validate_bluedart_columns(bluedart_rows)
            if delhivery_rows:
                validate_delhivery_columns(delhivery_rows)

        steps: list[PipelineStep] = []

        bluedart = normalize_bluedart(bluedart_rows, self.settings)
        steps.append(self._step("normalize-bluedart", len(bluedart_rows), f"{len(bluedart)} records"))

        delhivery = normalize_delhivery(delhivery_rows, self.settings)
        steps.append(self._step("normalize-delhivery", len(delhivery_rows), f"{len(delhivery)} records"))

        combined = bluedart + delhivery
        steps.append(PipelineStep("combine", StepStatus.COMPLETED, f"{len(combined)} total shipments"))

        shipments = detect_outliers(
            combined,
            min_group_size=self.settings.outlier_min_group_size,
            low=self.settings.outlier_low_percentile,
            high=self.settings.outlier_high_percentile,
        )
        flagged_count = sum(1 for s in shipments if s.flag_miscalculated)
        steps.append(PipelineStep("calculate", StepStatus.COMPLETED, f"{flagged_count} flagged shipments"))

        kpis = calculate_kpis(shipments, top_pins_limit=self.settings.top_pins_limit)
        steps.append(PipelineStep("kpis", StepStatus.COMPLETED, f"{kpis.suspected_overbilling_count} overbilled"))

        insights = generate_insights(
            shipments,
            kpis,
            dispute_rate_threshold=self.settings.insight_dispute_rate_pct,
            avg_overbilling_threshold=self.settings.insight_avg_overbilling_value,
            carrier_dispute_rate_threshold=self.settings.insight_carrier_dispute_rate_pct,
        )
        steps.append(PipelineStep("insights", StepStatus.COMPLETED, f"{len(insights.recommendations)} recommendations"))

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        log_event(
            logger,
            "reconciliation_completed",
            bluedart=len(bluedart),
            delhivery=len(delhivery),
            flagged=flagged_count,
            processing_time_ms=elapsed_ms,
        )

        return ReconciliationResult(
            shipments=shipments,
            kpis=kpis,
            insights=insights,
            steps=steps,
            processing_time_ms=elapsed_ms,
        )

    @staticmethod
    def _step(name: str, rows_in: int, details: str) -> PipelineStep:
        if rows_in == 0:
            return PipelineStep(name, StepStatus.SKIPPED, "no rows")
        return PipelineStep(name, StepStatus.COMPLETED, details)
