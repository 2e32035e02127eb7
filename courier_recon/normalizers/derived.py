"""Derived fields and rule flags shared by every carrier normalizer.

Both carriers build their shipments through ``build_shipment`` so the two
sides stay comparable downstream.
"""

from datetime import datetime
from typing import Any

from courier_recon.config import Settings, settings as default_settings
from courier_recon.schemas.shipment import Carrier, NormalizedShipment

UNKNOWN_ZONE = "Unknown"

# Destination city prefix -> billing zone. Partial: unmapped prefixes stay Unknown.
ZONE_BY_PREFIX = {
    "MAA": "South",
    "BLR": "South",
    "TJV": "South",
    "NAM": "South",
    "CJB": "South",
    "DEL": "North",
    "MUM": "West",
    "KOL": "East",
}


def value_bucket(value: float) -> str:
    if value <= 500:
        return "≤500"
    if value <= 1000:
        return "501-1000"
    if value <= 2000:
        return "1001-2000"
    return ">2000"


def zone_from_destination(destination: str) -> str:
    prefix = destination.split("-")[0]
    return ZONE_BY_PREFIX.get(prefix, UNKNOWN_ZONE)


def derive_fields(
    actual_kg: float,
    charged_kg: float,
    line_amount: float,
    product_value: float,
    config: Settings = default_settings,
) -> dict[str, Any]:
    """Compute weight deltas, per-kg rate, value bucket and rule flags.

    Pure function of the base quantities. The group-dependent flags
    (charge outlier, miscalculated) are left to the outlier detector.

    Args:
        actual_kg: Actual weight in kilograms, 0 when unknown.
        charged_kg: Charged weight in kilograms.
        line_amount: Billed amount for the shipment.
        product_value: Declared product value.
        config: Thresholds for the rule flags.

    Returns:
        Dict of derived ``NormalizedShipment`` fields.
    """
    diff = charged_kg - actual_kg
    tolerance = config.overbilling_tolerance_kg
    return {
        "weight_diff_kg": diff,
        "weight_diff_percent": diff / actual_kg * 100 if actual_kg > 0 else 0.0,
        "per_kg_rate": line_amount / charged_kg if charged_kg > 0 else 0.0,
        "value_bucket": value_bucket(product_value),
        "is_overbilled": diff > tolerance,
        "is_underbilled": diff < -tolerance,
        "flag_high_uplift": charged_kg >= actual_kg + config.high_uplift_kg,
        "flag_roundup_jump": (
            actual_kg < config.roundup_actual_below_kg
            and charged_kg >= config.roundup_charged_at_least_kg
        ),
        "flag_value_weight_mismatch": (
            product_value >= config.value_mismatch_min_value
            and actual_kg < config.value_mismatch_max_actual_kg
        ),
        "flag_missing_actual": actual_kg <= 0,
    }


def build_shipment(
    *,
    carrier: Carrier,
    awb: str,
    pickup_date: datetime,
    origin: str,
    destination: str,
    pin: str,
    service: str,
    zone: str,
    status: str,
    actual_weight_kg: float,
    charged_weight_kg: float,
    pieces: int,
    line_amount: float,
    product_value: float,
    original_data: dict[str, Any],
    config: Settings = default_settings,
) -> NormalizedShipment:
    return NormalizedShipment(
        original_data=original_data,
        carrier=carrier,
        awb=awb,
        pickup_date=pickup_date,
        origin=origin,
        destination=destination,
        pin=pin,
        service=service,
        zone=zone,
        status=status,
        actual_weight_kg=actual_weight_kg,
        charged_weight_kg=charged_weight_kg,
        pieces=pieces,
        line_amount=line_amount,
        product_value=product_value,
        **derive_fields(actual_weight_kg, charged_weight_kg, line_amount, product_value, config),
    )
