"""Delhivery billing export -> NormalizedShipment.

Delhivery exports have no physical weight column. Actual weight is estimated
from the declared product value with a fixed grams-per-value ratio, and the
charged weight unit is sniffed once for the whole batch.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from courier_recon.config import Settings, settings as default_settings
from courier_recon.logging_config import log_event
from courier_recon.normalizers.dates import parse_date
from courier_recon.normalizers.derived import build_shipment
from courier_recon.normalizers.units import detect_weight_unit
from courier_recon.schemas.raw import DelhiveryRow
from courier_recon.schemas.shipment import Carrier, NormalizedShipment, WeightUnit

logger = logging.getLogger("courier_recon.normalizers.delhivery")


def estimate_actual_weight_kg(product_value: float, grams_per_value_unit: float = 450 / 360) -> float:
    if product_value <= 0:
        return 0.0
    return product_value * grams_per_value_unit / 1000


def normalize_delhivery_row(
    row: DelhiveryRow,
    raw: Mapping[str, Any],
    charged_unit: WeightUnit,
    config: Settings = default_settings,
) -> NormalizedShipment:
    actual = estimate_actual_weight_kg(row.product_value, config.delhivery_grams_per_value_unit)
    charged = row.charged_weight
    if charged_unit is WeightUnit.GRAMS:
        charged = charged / 1000

    return build_shipment(
        carrier=Carrier.DELHIVERY,
        awb=row.awb,
        pickup_date=parse_date(row.pickup_date),
        origin=row.origin,
        destination=row.destination_pin,
        pin=row.destination_pin,
        service=row.service,
        zone=row.zone,
        status=row.status,
        actual_weight_kg=actual,
        charged_weight_kg=charged,
        pieces=row.pieces,
        line_amount=row.amount,
        product_value=row.product_value,
        original_data=dict(raw),
        config=config,
    )


def normalize_delhivery(
    rows: Sequence[Mapping[str, Any]],
    config: Settings = default_settings,
) -> list[NormalizedShipment]:
    parsed = [DelhiveryRow.from_raw(raw) for raw in rows]
    charged_unit = detect_weight_unit(
        [row.charged_weight for row in parsed],
        grams_mean_lower=config.grams_mean_lower,
        grams_mean_upper=config.grams_mean_upper,
    )

    shipments = [
        normalize_delhivery_row(row, raw, charged_unit, config)
        for row, raw in zip(parsed, rows)
    ]
    log_event(
        logger,
        "normalize_delhivery",
        rows_in=len(rows),
        shipments_out=len(shipments),
        charged_unit=charged_unit.value,
        overbilled=sum(1 for s in shipments if s.is_overbilled),
    )
    return shipments
