"""BlueDart billing export -> NormalizedShipment."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from courier_recon.config import Settings, settings as default_settings
from courier_recon.logging_config import log_event
from courier_recon.normalizers.dates import parse_date
from courier_recon.normalizers.derived import build_shipment, zone_from_destination
from courier_recon.schemas.raw import BlueDartRow
from courier_recon.schemas.shipment import Carrier, NormalizedShipment

logger = logging.getLogger("courier_recon.normalizers.bluedart")

# BlueDart exports carry no delivery status column
DEFAULT_STATUS = "Delivered"


def normalize_bluedart_row(
    raw: Mapping[str, Any],
    config: Settings = default_settings,
) -> NormalizedShipment:
    row = BlueDartRow.from_raw(raw)

    actual = row.actual_weight
    charged = row.charged_weight
    if charged == 0:
        charged = actual if actual > 0 else config.default_charged_weight_kg

    return build_shipment(
        carrier=Carrier.BLUEDART,
        awb=row.awb,
        pickup_date=parse_date(row.pickup_date),
        origin=row.origin,
        destination=row.destination,
        pin=row.pin,
        service=row.service,
        zone=zone_from_destination(row.destination),
        status=DEFAULT_STATUS,
        actual_weight_kg=actual,
        charged_weight_kg=charged,
        pieces=row.pieces,
        line_amount=row.amount,
        product_value=row.product_value,
        original_data=dict(raw),
        config=config,
    )


def normalize_bluedart(
    rows: Sequence[Mapping[str, Any]],
    config: Settings = default_settings,
) -> list[NormalizedShipment]:
    """Normalize a BlueDart batch. Weights are already in kg."""
    shipments = [normalize_bluedart_row(row, config) for row in rows]
    log_event(
        logger,
        "normalize_bluedart",
        rows_in=len(rows),
        shipments_out=len(shipments),
        overbilled=sum(1 for s in shipments if s.is_overbilled),
    )
    return shipments
