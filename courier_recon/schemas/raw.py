"""Carrier-specific raw row models.

Carrier exports name the same logical column differently from one export
vintage to the next (``AWB_NO`` vs ``AWB``, ``PIN CODE`` vs ``PIN_CODE``).
Each carrier declares an alias table: logical field -> column names tried in
order. Aliases are resolved once, when the row model is built, so the
normalizers only ever see logical field names.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, field_validator

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

BLUEDART_ALIASES: dict[str, tuple[str, ...]] = {
    "awb": ("AWB_NO", "AWB"),
    "pickup_date": ("PICKUP_DT", "PICKUP_DATE"),
    "pin": ("PIN CODE", "PIN_CODE"),
    "origin": ("ORIGIN",),
    "destination": ("DESTINATION",),
    "service": ("SVC",),
    "actual_weight": ("ACT_WT",),
    "charged_weight": ("CHRG_WT",),
    "amount": ("AMOUNT",),
    "product_value": ("VALUE",),
    "pieces": ("PCS",),
}

DELHIVERY_ALIASES: dict[str, tuple[str, ...]] = {
    "awb": ("waybill_num",),
    "pickup_date": ("pickup_date",),
    "origin": ("origin_center",),
    "destination_pin": ("destination_pin",),
    "service": ("package_type",),
    "zone": ("zone",),
    "status": ("status",),
    "product_value": ("product_value",),
    "charged_weight": ("charged_weight",),
    "amount": ("total_amount",),
    "pieces": ("item_shipped",),
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def resolve_aliases(row: Mapping[str, Any], aliases: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    """Map a raw row onto logical field names.

    For each field the first alias holding a non-blank value wins. Fields with
    no usable value are left out so the model default applies.
    """
    resolved: dict[str, Any] = {}
    for field_name, columns in aliases.items():
        for column in columns:
            value = row.get(column)
            if not _is_blank(value):
                resolved[field_name] = value
                break
    return resolved


def coerce_float(value: Any, default: float = 0.0) -> float:
    """Lenient numeric read: leading number of the text, else ``default``.

    Zero and non-finite values also fall back to ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value).strip())
        if not match:
            return default
        number = float(match.group(0))
    if not math.isfinite(number) or number == 0:
        return default
    return number


def coerce_int(value: Any, default: int = 1) -> int:
    number = coerce_float(value, default=0.0)
    # Truncate toward zero like a piece count read from text
    count = int(number)
    return count if count != 0 else default


def coerce_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # PIN codes and waybills pre-coerced to numbers upstream
        return str(int(value))
    return str(value)


class _RawRow(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    column_aliases: ClassVar[dict[str, tuple[str, ...]]] = {}

    @classmethod
    def from_raw(cls, row: Mapping[str, Any]):
        return cls.model_validate(resolve_aliases(row, cls.column_aliases))


class BlueDartRow(_RawRow):
    column_aliases: ClassVar[dict[str, tuple[str, ...]]] = BLUEDART_ALIASES

    awb: str = ""
    pickup_date: str = ""
    pin: str = ""
    origin: str = ""
    destination: str = ""
    service: str = "Standard"
    actual_weight: float = 0.0
    charged_weight: float = 0.0
    amount: float = 0.0
    product_value: float = 0.0
    pieces: int = 1

    @field_validator("awb", "pickup_date", "pin", "origin", "destination", "service", mode="before")
    @classmethod
    def coerce_text_fields(cls, v: Any) -> str:
        return coerce_text(v)

    @field_validator("actual_weight", "charged_weight", "amount", "product_value", mode="before")
    @classmethod
    def coerce_number_fields(cls, v: Any) -> float:
        return coerce_float(v)

    @field_validator("pieces", mode="before")
    @classmethod
    def coerce_piece_count(cls, v: Any) -> int:
        return coerce_int(v)


class DelhiveryRow(_RawRow):
    column_aliases: ClassVar[dict[str, tuple[str, ...]]] = DELHIVERY_ALIASES

    awb: str = ""
    pickup_date: str = ""
    origin: str = ""
    destination_pin: str = ""
    service: str = ""
    zone: str = "Unknown"
    status: str = ""
    product_value: float = 0.0
    charged_weight: float = 0.0
    amount: float = 0.0
    pieces: int = 1

    @field_validator("awb", "pickup_date", "origin", "destination_pin", "service", "zone", "status", mode="before")
    @classmethod
    def coerce_text_fields(cls, v: Any) -> str:
        return coerce_text(v)

    @field_validator("product_value", "charged_weight", "amount", mode="before")
    @classmethod
    def coerce_number_fields(cls, v: Any) -> float:
        return coerce_float(v)

    @field_validator("pieces", mode="before")
    @classmethod
    def coerce_piece_count(cls, v: Any) -> int:
        return coerce_int(v)
