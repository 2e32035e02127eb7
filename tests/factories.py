"""Builders for raw carrier rows and normalized shipments used across tests."""

from datetime import datetime, timezone

from courier_recon.normalizers.derived import build_shipment
from courier_recon.schemas.shipment import Carrier, NormalizedShipment


def make_shipment(**overrides) -> NormalizedShipment:
    """Build a shipment through the shared derivation path with test defaults."""
    fields = {
        "carrier": Carrier.BLUEDART,
        "awb": "AWB-0001",
        "pickup_date": datetime(2025, 7, 7, tzinfo=timezone.utc),
        "origin": "BOM",
        "destination": "MAA-Chennai",
        "pin": "600001",
        "service": "Standard",
        "zone": "South",
        "status": "Delivered",
        "actual_weight_kg": 1.0,
        "charged_weight_kg": 1.0,
        "pieces": 1,
        "line_amount": 100.0,
        "product_value": 400.0,
        "original_data": {},
    }
    fields.update(overrides)
    return build_shipment(**fields)


def bluedart_row(**overrides) -> dict:
    row = {
        "CODE": "CUST01",
        "SVC": "Apex",
        "AWB_NO": "50912345678",
        "PICKUP_DT": "07-Jul-25",
        "ORIGIN": "BOM",
        "DESTINATION": "MAA-Chennai",
        "ACT_WT": 0.94,
        "CHRG_WT": 1.0,
        "PCS": 1,
        "AMOUNT": 87.43,
        "PIN_CODE": "600001",
        "VALUE": 450,
    }
    row.update(overrides)
    return row


def delhivery_row(**overrides) -> dict:
    row = {
        "waybill_num": "1490811234567",
        "client": "ACME",
        "pickup_date": "28-07-2025 07:48",
        "origin_center": "Bhiwandi_DC",
        "package_type": "Surface",
        "product_value": 360,
        "status": "Delivered",
        "charged_weight": 500,
        "zone": "D",
        "total_amount": 62.0,
        "destination_pin": "560001",
        "item_shipped": 1,
    }
    row.update(overrides)
    return row
