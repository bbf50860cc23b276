"""Tests for the report field registry."""

import pytest

from feasibility.exceptions import UnknownFieldError
from feasibility.models import (
    KeyDateSummary,
    Pursuit,
    PursuitStage,
    ReportDataSource,
    ReportRow,
    Scenario,
)
from feasibility.reports.fields import (
    DEFAULT_REGISTRY,
    REPORT_FIELDS,
    AggregationMode,
    FieldDefinition,
    FieldRegistry,
    FieldType,
)
from feasibility.reports.formatting import PLACEHOLDER, fmt_number, fmt_text


def _field(key, type_, aggregation=None):
    return FieldDefinition(
        key=key,
        label=key.title(),
        category="Test",
        type=type_,
        get_value=lambda row: None,
        format=fmt_text,
        aggregation=aggregation,
    )


class TestFieldDefinition:
    """Tests for default and overridden aggregation modes."""

    @pytest.mark.parametrize(
        "type_,expected",
        [
            (FieldType.NUMBER, AggregationMode.SUM),
            (FieldType.CURRENCY, AggregationMode.SUM),
            (FieldType.PERCENT, AggregationMode.AVG),
            (FieldType.TEXT, None),
            (FieldType.DATE, None),
        ],
    )
    def test_default_aggregation(self, type_, expected):
        """Percent averages, number and currency sum, text and date have none."""
        assert _field("x", type_).resolved_aggregation() == expected

    def test_override(self):
        """An explicit mode wins over the type default."""
        assert _field("x", FieldType.CURRENCY, AggregationMode.AVG).resolved_aggregation() == AggregationMode.AVG

    def test_none_excludes(self):
        """'none' removes the field from aggregation."""
        assert _field("x", FieldType.NUMBER, AggregationMode.NONE).resolved_aggregation() is None


class TestFieldRegistry:
    """Tests for registry lookups."""

    def test_duplicate_keys_rejected(self):
        """Two fields with the same key cannot be registered."""
        with pytest.raises(ValueError, match="Duplicate"):
            FieldRegistry([_field("a", FieldType.TEXT), _field("a", FieldType.NUMBER)])

    def test_unknown_key_raises(self):
        """Indexing an unknown key raises UnknownFieldError."""
        with pytest.raises(UnknownFieldError) as exc:
            DEFAULT_REGISTRY["no_such_field"]

        assert exc.value.key == "no_such_field"
        assert "no_such_field" in str(exc.value)

    def test_unknown_is_key_error(self):
        """UnknownFieldError is a KeyError, so Mapping helpers work."""
        assert DEFAULT_REGISTRY.get("no_such_field") is None
        assert "no_such_field" not in DEFAULT_REGISTRY
        with pytest.raises(KeyError):
            DEFAULT_REGISTRY.require("no_such_field")

    def test_order_and_length(self):
        """The registry keeps registration order."""
        assert list(DEFAULT_REGISTRY) == [f.key for f in REPORT_FIELDS]
        assert len(DEFAULT_REGISTRY) == len(REPORT_FIELDS)

    def test_numeric_fields(self):
        """Only fields with an aggregation mode are numeric."""
        keys = {f.key for f in DEFAULT_REGISTRY.numeric_fields()}

        assert "calc_noi" in keys
        assert "calc_yoc" in keys
        assert "region" not in keys
        assert "pursuit_created_at" not in keys

    def test_for_source(self):
        """Each data source sees only its own categories."""
        comp_keys = {f.key for f in DEFAULT_REGISTRY.for_source(ReportDataSource.LAND_COMPS)}
        pursuit_keys = {f.key for f in DEFAULT_REGISTRY.for_source("pursuits")}
        key_date_keys = {f.key for f in DEFAULT_REGISTRY.for_source(ReportDataSource.KEY_DATES)}

        assert all(k.startswith("comp_") for k in comp_keys)
        assert all(k.startswith("kd_") for k in key_date_keys)
        assert "region" in pursuit_keys
        assert not pursuit_keys & comp_keys

    def test_unknown_source_falls_back_to_pursuits(self):
        """An unrecognized source name is treated as pursuits."""
        assert DEFAULT_REGISTRY.for_source("rent_comps") == DEFAULT_REGISTRY.for_source("pursuits")

    def test_groupable_fields(self):
        """Groupable fields include region and stage but not names."""
        keys = {f.key for f in DEFAULT_REGISTRY.groupable_fields(ReportDataSource.PURSUITS)}

        assert {"region", "stage", "city", "product_type"} <= keys
        assert "pursuit_name" not in keys

    def test_categories(self):
        """Categories come back in registration order."""
        categories = list(DEFAULT_REGISTRY.categories(ReportDataSource.PURSUITS))
        assert categories == ["Pursuit", "One-Pager", "Returns", "Revenue", "Budget", "OpEx", "Assumptions"]
        assert "Land Comp" not in categories


class TestAccessors:
    """Tests for the default field accessors."""

    def test_pursuit_fields(self, region_rows):
        """Pursuit fields read the pursuit record."""
        row = region_rows[0]

        assert DEFAULT_REGISTRY["region"].get_value(row) == "DFW"
        assert DEFAULT_REGISTRY["stage"].get_value(row) == "Screening"
        assert DEFAULT_REGISTRY["site_area_acres"].get_value(row) == pytest.approx(2.0)

    def test_stage_placeholder(self):
        """A pursuit with no stage reports the placeholder."""
        row = ReportRow(pursuit=Pursuit(id="p", name="No stage"))
        assert DEFAULT_REGISTRY["stage"].get_value(row) == PLACEHOLDER

    def test_stage_from_row(self):
        """The row's own stage is used when the pursuit has none joined."""
        row = ReportRow(pursuit=Pursuit(id="p"), stage=PursuitStage(id="s", name="Closed"))
        assert DEFAULT_REGISTRY["stage"].get_value(row) == "Closed"

    def test_calculated_fields(self, region_rows):
        """Calculated fields read the calculation results."""
        row = region_rows[0]

        assert DEFAULT_REGISTRY["calc_total_budget"].get_value(row) == pytest.approx(21_890_000)
        assert DEFAULT_REGISTRY["calc_yoc"].get_value(row) == pytest.approx(row.results.unlevered_yield_on_cost)
        assert DEFAULT_REGISTRY["unit_avg_size"].get_value(row) == pytest.approx(850)
        assert DEFAULT_REGISTRY["land_cost_per_unit"].get_value(row) == pytest.approx(20_000)
        assert DEFAULT_REGISTRY["land_cost_per_sf"].get_value(row) == pytest.approx(2_000_000 / 87_120)

    def test_missing_scenario(self):
        """Scenario and calculated fields are None for a bare pursuit."""
        row = ReportRow(pursuit=Pursuit(id="p", name="Bare"))

        for key in ("calc_noi", "land_cost", "unit_avg_size", "opex_ratio", "controllable_opex", "total_units"):
            assert DEFAULT_REGISTRY[key].get_value(row) is None, key

    def test_controllable_opex_excludes_insurance(self):
        """Controllable opex sums every category but insurance."""
        row = ReportRow(
            pursuit=Pursuit(id="p"),
            scenario=Scenario(opex_utilities=40_000, opex_marketing=10_000, opex_insurance=99_000),
        )
        assert DEFAULT_REGISTRY["controllable_opex"].get_value(row) == pytest.approx(50_000)

    def test_zero_ratios_are_none(self):
        """Report ratios with a missing or zero side are None, not 0."""
        row = ReportRow(pursuit=Pursuit(id="p", site_area_sf=0), scenario=Scenario(land_cost=1_000_000))

        assert DEFAULT_REGISTRY["land_cost_per_sf"].get_value(row) is None
        assert DEFAULT_REGISTRY["site_area_acres"].get_value(row) is None

    def test_numeric_text_inputs(self):
        """Records loaded with numeric strings give the same ratios as numbers."""
        row = ReportRow(
            pursuit=Pursuit.from_dict({"id": "p", "site_area_sf": "87120"}),
            scenario=Scenario.from_dict({
                "land_cost": "2000000",
                "total_units": "100",
                "opex_utilities": "40000",
                "opex_marketing": None,
                "opex_misc": "n/a",
            }),
        )

        assert DEFAULT_REGISTRY["site_area_acres"].get_value(row) == pytest.approx(2.0)
        assert DEFAULT_REGISTRY["land_cost_per_unit"].get_value(row) == pytest.approx(20_000)
        assert DEFAULT_REGISTRY["land_cost_per_sf"].get_value(row) == pytest.approx(2_000_000 / 87_120)
        assert DEFAULT_REGISTRY["controllable_opex"].get_value(row) == pytest.approx(40_000)

    def test_unparseable_text_inputs_are_none(self):
        """Ratios over text that is not a number are None rather than an error."""
        row = ReportRow(
            pursuit=Pursuit.from_dict({"id": "p", "site_area_sf": "about an acre"}),
            scenario=Scenario.from_dict({"land_cost": "TBD", "total_units": "100"}),
        )

        assert DEFAULT_REGISTRY["site_area_acres"].get_value(row) is None
        assert DEFAULT_REGISTRY["land_cost_per_unit"].get_value(row) is None
        assert DEFAULT_REGISTRY["land_cost_per_sf"].get_value(row) is None

    def test_land_comp_fields(self, land_comp_rows):
        """Comp fields read the comp; a blank comp name falls back to the pursuit name."""
        first, blank, _ = land_comp_rows

        assert DEFAULT_REGISTRY["comp_sale_price"].get_value(first) == 4_000_000
        assert DEFAULT_REGISTRY["comp_name"].get_value(blank) == "Stub c2"
        assert DEFAULT_REGISTRY["comp_address"].get_value(blank) == ""
        assert DEFAULT_REGISTRY["comp_site_area_acres"].get_value(blank) is None

    def test_key_date_fields(self):
        """Key-date fields read the roll-up attached to the row."""
        row = ReportRow(
            pursuit=Pursuit(id="p", name="Elm", region="DFW"),
            key_dates=KeyDateSummary(closing_date="2026-03-01", total_dates=4, overdue_count=1),
            source="key_dates",
        )

        assert DEFAULT_REGISTRY["kd_pursuit_name"].get_value(row) == "Elm"
        assert DEFAULT_REGISTRY["kd_closing_date"].get_value(row) == "2026-03-01"
        assert DEFAULT_REGISTRY["kd_total_dates"].get_value(row) == 4
        assert DEFAULT_REGISTRY["kd_next_date_days"].get_value(row) is None

    def test_formatting(self, region_rows):
        """Fields format their own values."""
        row = region_rows[0]
        tax = DEFAULT_REGISTRY["tax_mil_rate"]

        assert DEFAULT_REGISTRY["calc_total_budget"].format(21_890_000) == "$21,890,000"
        assert DEFAULT_REGISTRY["calc_yoc"].format(0.075) == "7.50%"
        assert tax.format(tax.get_value(row)) == fmt_number(0, 4)
        assert DEFAULT_REGISTRY["site_area_acres"].format(None) == PLACEHOLDER
