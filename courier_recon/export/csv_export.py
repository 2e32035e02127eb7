"""Fixed-layout CSV rendering of shipments, and the matching reader.

The layout is consumed by finance teams when raising weight disputes, so
column order and number formatting are fixed. Writing the file is the
caller's job; these functions work on text.
"""

import csv
import io
import re
from collections.abc import Sequence
from datetime import date, datetime

from pydantic import BaseModel

from courier_recon.exceptions import CsvFormatError
from courier_recon.schemas.shipment import NormalizedShipment

EXPORT_HEADERS = [
    "Pickup Date",
    "Carrier",
    "AWB",
    "Origin",
    "Destination",
    "PIN",
    "Pieces",
    "Actual Weight (kg)",
    "Charged Weight (kg)",
    "Weight Diff (kg)",
    "Weight Diff (%)",
    "Line Amount",
    "Per Kg Rate",
    "Product Value",
    "Service",
    "Zone",
    "Status",
    "High Uplift",
    "Roundup Jump",
    "Value-Weight Mismatch",
    "Charge Outlier",
    "Missing Actual",
]


def _fixed(value: float, places: int) -> float:
    return float(f"{value:.{places}f}")


def _flag(value: bool) -> str:
    return "Y" if value else "N"


def _read_flag(value: str) -> bool:
    if value not in ("Y", "N"):
        raise CsvFormatError(f"Expected Y/N flag, got {value!r}")
    return value == "Y"


class ExportRow(BaseModel):
    """One CSV line with values at export precision."""

    pickup_date: date
    carrier: str
    awb: str
    origin: str
    destination: str
    pin: str
    pieces: int
    actual_weight_kg: float
    charged_weight_kg: float
    weight_diff_kg: float
    weight_diff_percent: float
    line_amount: float
    per_kg_rate: float
    product_value: float
    service: str
    zone: str
    status: str
    flag_high_uplift: bool
    flag_roundup_jump: bool
    flag_value_weight_mismatch: bool
    flag_charge_outlier: bool
    flag_missing_actual: bool

    @classmethod
    def from_shipment(cls, s: NormalizedShipment) -> "ExportRow":
        return cls(
            pickup_date=s.pickup_date.date(),
            carrier=s.carrier.value,
            awb=s.awb,
            origin=s.origin,
            destination=s.destination,
            pin=s.pin,
            pieces=s.pieces,
            actual_weight_kg=_fixed(s.actual_weight_kg, 3),
            charged_weight_kg=_fixed(s.charged_weight_kg, 3),
            weight_diff_kg=_fixed(s.weight_diff_kg, 3),
            weight_diff_percent=_fixed(s.weight_diff_percent, 2),
            line_amount=_fixed(s.line_amount, 2),
            per_kg_rate=_fixed(s.per_kg_rate, 2),
            product_value=_fixed(s.product_value, 2),
            service=s.service,
            zone=s.zone,
            status=s.status,
            flag_high_uplift=s.flag_high_uplift,
            flag_roundup_jump=s.flag_roundup_jump,
            flag_value_weight_mismatch=s.flag_value_weight_mismatch,
            flag_charge_outlier=s.flag_charge_outlier,
            flag_missing_actual=s.flag_missing_actual,
        )

    def to_cells(self) -> list[str]:
        return [
            self.pickup_date.isoformat(),
            self.carrier,
            self.awb,
            self.origin,
            self.destination,
            self.pin,
            str(self.pieces),
            f"{self.actual_weight_kg:.3f}",
            f"{self.charged_weight_kg:.3f}",
            f"{self.weight_diff_kg:.3f}",
            f"{self.weight_diff_percent:.2f}",
            f"{self.line_amount:.2f}",
            f"{self.per_kg_rate:.2f}",
            f"{self.product_value:.2f}",
            self.service,
            self.zone,
            self.status,
            _flag(self.flag_high_uplift),
            _flag(self.flag_roundup_jump),
            _flag(self.flag_value_weight_mismatch),
            _flag(self.flag_charge_outlier),
            _flag(self.flag_missing_actual),
        ]

    @classmethod
    def from_cells(cls, cells: Sequence[str]) -> "ExportRow":
        if len(cells) != len(EXPORT_HEADERS):
            raise CsvFormatError(f"Expected {len(EXPORT_HEADERS)} columns, got {len(cells)}")
        try:
            return cls(
                pickup_date=date.fromisoformat(cells[0]),
                carrier=cells[1],
                awb=cells[2],
                origin=cells[3],
                destination=cells[4],
                pin=cells[5],
                pieces=int(cells[6]),
                actual_weight_kg=float(cells[7]),
                charged_weight_kg=float(cells[8]),
                weight_diff_kg=float(cells[9]),
                weight_diff_percent=float(cells[10]),
                line_amount=float(cells[11]),
                per_kg_rate=float(cells[12]),
                product_value=float(cells[13]),
                service=cells[14],
                zone=cells[15],
                status=cells[16],
                flag_high_uplift=_read_flag(cells[17]),
                flag_roundup_jump=_read_flag(cells[18]),
                flag_value_weight_mismatch=_read_flag(cells[19]),
                flag_charge_outlier=_read_flag(cells[20]),
                flag_missing_actual=_read_flag(cells[21]),
            )
        except ValueError as e:
            raise CsvFormatError(f"Malformed export row: {e}") from e


def render_csv(shipments: Sequence[NormalizedShipment]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for shipment in shipments:
        writer.writerow(ExportRow.from_shipment(shipment).to_cells())
    return buffer.getvalue()


def parse_csv(text: str) -> list[ExportRow]:
    """Read text produced by ``render_csv`` back into typed rows."""
    reader = csv.reader(io.StringIO(text))
    header = next(reader, None)
    if header != EXPORT_HEADERS:
        raise CsvFormatError(f"Unexpected export header: {header}")
    return [ExportRow.from_cells(cells) for cells in reader if cells]


def export_filename(prefix: str = "courier-analysis", now: datetime | None = None) -> str:
    now = now or datetime.now()
    slug = re.sub(r"\s+", "-", prefix.lower())
    return f"{slug}-export-{now.strftime('%Y-%m-%d-%H%M')}.csv"
