"""Required-column checks run before a batch is normalized.

These are the only checks that raise: a file missing its identifier or
pickup date column is rejected as a whole. Everything past this gate is
handled with defaults.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from courier_recon.exceptions import MissingColumnsError
from courier_recon.schemas.raw import BLUEDART_ALIASES, DELHIVERY_ALIASES
from courier_recon.schemas.shipment import Carrier

BLUEDART_REQUIRED = ("awb", "pickup_date")
DELHIVERY_REQUIRED = ("awb", "pickup_date")


def missing_columns(
    columns: Sequence[str],
    aliases: dict[str, tuple[str, ...]],
    required: Sequence[str],
) -> list[str]:
    """Describe each required field with none of its aliases present."""
    present = set(columns)
    missing = []
    for field_name in required:
        candidates = aliases[field_name]
        if not present.intersection(candidates):
            if len(candidates) == 1:
                missing.append(candidates[0])
            else:
                missing.append(f"{field_name} (expected {' or '.join(candidates)})")
    return missing


def _columns(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    return list(rows[0].keys()) if rows else []


def validate_bluedart_columns(rows: Sequence[Mapping[str, Any]]) -> None:
    missing = missing_columns(_columns(rows), BLUEDART_ALIASES, BLUEDART_REQUIRED)
    if missing:
        raise MissingColumnsError(Carrier.BLUEDART.value, missing)


def validate_delhivery_columns(rows: Sequence[Mapping[str, Any]]) -> None:
    missing = missing_columns(_columns(rows), DELHIVERY_ALIASES, DELHIVERY_REQUIRED)
    if missing:
        raise MissingColumnsError(Carrier.DELHIVERY.value, missing)
