"""Tests for weight unit detection, shared derivations and carrier normalizers."""

from datetime import datetime, timezone

import pytest

from courier_recon.normalizers.bluedart import normalize_bluedart, normalize_bluedart_row
from courier_recon.normalizers.delhivery import estimate_actual_weight_kg, normalize_delhivery
from courier_recon.normalizers.derived import derive_fields, value_bucket, zone_from_destination
from courier_recon.normalizers.units import detect_weight_unit
from courier_recon.schemas.shipment import Carrier, WeightUnit
from tests.factories import bluedart_row, delhivery_row


# ── Weight unit detection ──


class TestDetectWeightUnit:
    """Tests for detect_weight_unit."""

    def test_grams(self):
        assert detect_weight_unit([100, 150, 200]) is WeightUnit.GRAMS

    def test_kilograms(self):
        assert detect_weight_unit([0.5, 1.0, 2.0]) is WeightUnit.KILOGRAMS

    def test_empty_defaults_to_kilograms(self):
        assert detect_weight_unit([]) is WeightUnit.KILOGRAMS

    def test_non_positive_samples_ignored(self):
        assert detect_weight_unit([0, -5, 0]) is WeightUnit.KILOGRAMS
        assert detect_weight_unit([0, 0, 500]) is WeightUnit.GRAMS

    def test_bounds_are_exclusive(self):
        assert detect_weight_unit([50]) is WeightUnit.KILOGRAMS
        assert detect_weight_unit([2000]) is WeightUnit.KILOGRAMS

    def test_very_heavy_mean_reads_as_kilograms(self):
        assert detect_weight_unit([5000, 6000]) is WeightUnit.KILOGRAMS


# ── Shared derivations ──


class TestValueBucket:
    """Tests for value_bucket."""

    @pytest.mark.parametrize(
        "value,bucket",
        [(0, "≤500"), (500, "≤500"), (501, "501-1000"), (1000, "501-1000"),
         (1500, "1001-2000"), (2000, "1001-2000"), (2000.01, ">2000")],
    )
    def test_breakpoints(self, value, bucket):
        assert value_bucket(value) == bucket


class TestZoneFromDestination:
    """Tests for zone_from_destination."""

    def test_known_prefix(self):
        assert zone_from_destination("MAA-Chennai") == "South"
        assert zone_from_destination("DEL-Okhla") == "North"

    def test_prefix_without_separator(self):
        assert zone_from_destination("KOL") == "East"

    def test_unmapped_prefix(self):
        assert zone_from_destination("HYD-Gachibowli") == "Unknown"

    def test_empty(self):
        assert zone_from_destination("") == "Unknown"


class TestDeriveFields:
    """Tests for derive_fields."""

    def test_small_uplift_not_overbilled(self):
        fields = derive_fields(0.94, 1.0, 87.43, 450)
        assert fields["weight_diff_kg"] == pytest.approx(0.06)
        assert fields["per_kg_rate"] == pytest.approx(87.43)
        assert fields["is_overbilled"] is False
        assert fields["is_underbilled"] is False

    def test_overbilled_and_high_uplift(self):
        fields = derive_fields(0.4, 1.0, 100, 300)
        assert fields["is_overbilled"] is True
        assert fields["flag_high_uplift"] is True
        assert fields["weight_diff_percent"] == pytest.approx(150.0)

    def test_underbilled(self):
        fields = derive_fields(2.0, 1.5, 100, 300)
        assert fields["is_underbilled"] is True
        assert fields["is_overbilled"] is False

    def test_roundup_jump(self):
        assert derive_fields(0.8, 1.5, 100, 0)["flag_roundup_jump"] is True
        assert derive_fields(1.0, 2.0, 100, 0)["flag_roundup_jump"] is False

    def test_value_weight_mismatch(self):
        assert derive_fields(0.3, 0.5, 100, 1000)["flag_value_weight_mismatch"] is True
        assert derive_fields(0.5, 0.5, 100, 1000)["flag_value_weight_mismatch"] is False

    def test_missing_actual_guards_division(self):
        fields = derive_fields(0.0, 1.0, 50, 0)
        assert fields["flag_missing_actual"] is True
        assert fields["weight_diff_percent"] == 0.0

    def test_zero_charged_rate_is_zero(self):
        assert derive_fields(1.0, 0.0, 50, 0)["per_kg_rate"] == 0.0

    def test_thresholds_from_settings(self, test_settings):
        strict = test_settings.model_copy(update={"overbilling_tolerance_kg": 0.01})
        assert derive_fields(0.94, 1.0, 87.43, 450, strict)["is_overbilled"] is True


# ── BlueDart ──


class TestNormalizeBlueDart:
    """Tests for the BlueDart normalizer."""

    def test_reference_row(self):
        shipment = normalize_bluedart_row(bluedart_row())
        assert shipment.carrier is Carrier.BLUEDART
        assert shipment.awb == "50912345678"
        assert shipment.pickup_date == datetime(2025, 7, 7, tzinfo=timezone.utc)
        assert shipment.weight_diff_kg == pytest.approx(0.06)
        assert shipment.per_kg_rate == pytest.approx(87.43)
        assert shipment.is_overbilled is False
        assert shipment.zone == "South"
        assert shipment.status == "Delivered"
        assert shipment.service == "Apex"
        assert shipment.pin == "600001"

    def test_awb_alias(self):
        row = bluedart_row(AWB="777")
        del row["AWB_NO"]
        assert normalize_bluedart_row(row).awb == "777"

    def test_missing_charged_uses_actual(self):
        shipment = normalize_bluedart_row(bluedart_row(CHRG_WT=None, ACT_WT=1.2))
        assert shipment.charged_weight_kg == 1.2
        assert shipment.weight_diff_kg == 0.0

    def test_missing_charged_and_actual_uses_floor(self):
        shipment = normalize_bluedart_row(bluedart_row(CHRG_WT="", ACT_WT=""))
        assert shipment.charged_weight_kg == 0.5
        assert shipment.actual_weight_kg == 0.0
        assert shipment.flag_missing_actual is True

    def test_negative_charged_weight_kept(self):
        shipment = normalize_bluedart_row(bluedart_row(CHRG_WT=-1.0, ACT_WT=1.2))
        assert shipment.charged_weight_kg == -1.0
        assert shipment.per_kg_rate == 0.0

    def test_unmapped_destination_zone(self):
        assert normalize_bluedart_row(bluedart_row(DESTINATION="HYD-X")).zone == "Unknown"

    def test_missing_service_defaults(self):
        row = bluedart_row()
        del row["SVC"]
        assert normalize_bluedart_row(row).service == "Standard"

    def test_original_row_retained(self):
        row = bluedart_row()
        shipment = normalize_bluedart_row(row)
        assert shipment.original_data == row
        assert shipment.original_data is not row

    def test_outlier_flags_start_false(self):
        shipment = normalize_bluedart_row(bluedart_row(ACT_WT=0.4, CHRG_WT=2.0))
        assert shipment.flag_roundup_jump is True
        assert shipment.flag_charge_outlier is False
        assert shipment.flag_miscalculated is False

    def test_batch(self):
        shipments = normalize_bluedart([bluedart_row(), bluedart_row(AWB_NO="2")])
        assert [s.awb for s in shipments] == ["50912345678", "2"]

    def test_empty_batch(self):
        assert normalize_bluedart([]) == []

    def test_degenerate_row_never_raises(self):
        shipment = normalize_bluedart_row({"AWB_NO": "X"})
        assert shipment.line_amount == 0.0
        assert shipment.pieces == 1


# ── Delhivery ──


class TestNormalizeDelhivery:
    """Tests for the Delhivery normalizer."""

    def test_estimate_actual_weight(self):
        assert estimate_actual_weight_kg(360) == pytest.approx(0.45)
        assert estimate_actual_weight_kg(0) == 0.0

    def test_reference_row_grams_batch(self):
        [shipment] = normalize_delhivery([delhivery_row()])
        assert shipment.carrier is Carrier.DELHIVERY
        assert shipment.actual_weight_kg == pytest.approx(0.45)
        assert shipment.charged_weight_kg == pytest.approx(0.5)
        assert shipment.weight_diff_kg == pytest.approx(0.05)
        assert shipment.pickup_date == datetime(2025, 7, 28, tzinfo=timezone.utc)

    def test_kilogram_batch_passes_through(self):
        rows = [delhivery_row(charged_weight=0.5), delhivery_row(charged_weight=1.5)]
        shipments = normalize_delhivery(rows)
        assert [s.charged_weight_kg for s in shipments] == [0.5, 1.5]

    def test_unit_detected_per_batch(self):
        # Mean is in the gram band, so the 2000 row is also read as grams
        rows = [delhivery_row(charged_weight=500), delhivery_row(charged_weight=1000),
                delhivery_row(charged_weight=2000)]
        shipments = normalize_delhivery(rows)
        assert [s.charged_weight_kg for s in shipments] == pytest.approx([0.5, 1.0, 2.0])

    def test_field_mapping(self):
        [shipment] = normalize_delhivery([delhivery_row()])
        assert shipment.awb == "1490811234567"
        assert shipment.origin == "Bhiwandi_DC"
        assert shipment.destination == "560001"
        assert shipment.pin == "560001"
        assert shipment.service == "Surface"
        assert shipment.zone == "D"
        assert shipment.status == "Delivered"
        assert shipment.line_amount == 62.0

    def test_missing_zone_is_unknown(self):
        row = delhivery_row()
        del row["zone"]
        [shipment] = normalize_delhivery([row])
        assert shipment.zone == "Unknown"

    def test_missing_product_value(self):
        [shipment] = normalize_delhivery([delhivery_row(product_value=None)])
        assert shipment.actual_weight_kg == 0.0
        assert shipment.flag_missing_actual is True
        assert shipment.weight_diff_percent == 0.0

    def test_empty_batch(self):
        assert normalize_delhivery([]) == []
