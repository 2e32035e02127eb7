"""Tests for the fixed-layout CSV export."""

from datetime import date, datetime

import pytest

from courier_recon.anomaly_flagger.detectors import detect_outliers
from courier_recon.exceptions import CsvFormatError
from courier_recon.export.csv_export import (
    EXPORT_HEADERS,
    ExportRow,
    export_filename,
    parse_csv,
    render_csv,
)
from courier_recon.normalizers.bluedart import normalize_bluedart
from courier_recon.normalizers.delhivery import normalize_delhivery
from tests.factories import bluedart_row, delhivery_row, make_shipment


class TestRenderCsv:
    """Tests for render_csv."""

    def test_header_layout(self):
        header = render_csv([]).splitlines()[0]
        assert header.split(",")[0] == "Pickup Date"
        assert len(EXPORT_HEADERS) == 22
        assert EXPORT_HEADERS[-5:] == [
            "High Uplift", "Roundup Jump", "Value-Weight Mismatch", "Charge Outlier", "Missing Actual",
        ]

    def test_row_formatting(self):
        [shipment] = normalize_bluedart([bluedart_row()])
        line = render_csv([shipment]).splitlines()[1]
        assert line == (
            "2025-07-07,BlueDart,50912345678,BOM,MAA-Chennai,600001,1,"
            "0.940,1.000,0.060,6.38,87.43,87.43,450.00,Apex,South,Delivered,N,N,N,N,N"
        )

    def test_flags_render_y(self):
        shipment = make_shipment(actual_weight_kg=0.0, charged_weight_kg=2.0)
        cells = render_csv([shipment]).splitlines()[1].split(",")
        assert cells[17] == "Y"  # high uplift
        assert cells[21] == "Y"  # missing actual

    def test_embedded_comma_quoted(self):
        shipment = make_shipment(origin="Mumbai, MH")
        assert '"Mumbai, MH"' in render_csv([shipment])


class TestParseCsv:
    """Tests for parse_csv."""

    def test_round_trip(self):
        shipments = detect_outliers(
            normalize_bluedart([bluedart_row(), bluedart_row(AWB_NO="2", ORIGIN='Pune, "West"')])
            + normalize_delhivery([delhivery_row(), delhivery_row(waybill_num="9", charged_weight=1500)])
        )
        parsed = parse_csv(render_csv(shipments))
        assert parsed == [ExportRow.from_shipment(s) for s in shipments]

    def test_typed_values(self):
        [row] = parse_csv(render_csv(normalize_bluedart([bluedart_row()])))
        assert row.pickup_date == date(2025, 7, 7)
        assert row.pieces == 1
        assert row.charged_weight_kg == 1.0
        assert row.flag_charge_outlier is False

    def test_header_mismatch(self):
        with pytest.raises(CsvFormatError):
            parse_csv("Date,Carrier\n2025-07-07,BlueDart\n")

    def test_wrong_column_count(self):
        text = ",".join(EXPORT_HEADERS) + "\n2025-07-07,BlueDart\n"
        with pytest.raises(CsvFormatError):
            parse_csv(text)

    def test_bad_flag(self):
        cells = ExportRow.from_shipment(make_shipment()).to_cells()
        cells[17] = "yes"
        text = ",".join(EXPORT_HEADERS) + "\n" + ",".join(cells) + "\n"
        with pytest.raises(CsvFormatError):
            parse_csv(text)


class TestExportFilename:
    """Tests for export_filename."""

    def test_slug_and_timestamp(self):
        name = export_filename("Courier Analysis", now=datetime(2025, 7, 7, 9, 5))
        assert name == "courier-analysis-export-2025-07-07-0905.csv"
