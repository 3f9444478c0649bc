"""
Unit tests for the row filter engine

Tests glob include/exclude semantics, NULL handling, blank patterns and the
statistics reported per table.
"""

import logging

from provisioning_sync.engine.filters import FilterStats, compile_rules, filter_rows, row_passes
from provisioning_sync.model import FilterConfig, FilterRule, FilterType


def _config(*rules, enabled=True):
    return FilterConfig(enabled=enabled, rules=tuple(FilterRule(*rule) for rule in rules))


ROWS = [
    {"emp_id": "E001", "dept": "Sales"},
    {"emp_id": "Z001", "dept": "Sales"},
    {"emp_id": "E002", "dept": "IT"},
    {"emp_id": "X9", "dept": None},
]


class TestFilterRows:
    """Test filter_rows function"""

    def test_disabled_filter_passes_everything(self):
        """Test a disabled filter keeps every row"""
        config = _config(("emp_id", FilterType.EXCLUDE, "*"), enabled=False)

        result = filter_rows(ROWS, config, "staff_master")

        assert result.passed == ROWS
        assert result.excluded == []
        assert result.stats.excluded == 0

    def test_none_config_passes_everything(self):
        """Test a missing filter configuration keeps every row"""
        result = filter_rows(ROWS, None, "staff_master")

        assert result.passed == ROWS

    def test_exclude_rule(self):
        """Test rows matching an exclude pattern are removed"""
        result = filter_rows(ROWS, _config(("emp_id", FilterType.EXCLUDE, "Z*")), "staff_master")

        assert [row["emp_id"] for row in result.passed] == ["E001", "E002", "X9"]
        assert [row["emp_id"] for row in result.excluded] == ["Z001"]

    def test_include_rule(self):
        """Test only rows matching an include pattern are kept"""
        result = filter_rows(ROWS, _config(("emp_id", FilterType.INCLUDE, "E*")), "staff_master")

        assert [row["emp_id"] for row in result.passed] == ["E001", "E002"]

    def test_rules_combine_with_and(self):
        """Test a row must satisfy every rule"""
        config = _config(
            ("emp_id", FilterType.INCLUDE, "E*"),
            ("dept", FilterType.EXCLUDE, "IT"),
        )

        result = filter_rows(ROWS, config, "staff_master")

        assert [row["emp_id"] for row in result.passed] == ["E001"]

    def test_glob_syntax(self):
        """Test ?, [] and * wildcards"""
        rows = [{"code": "A1"}, {"code": "A12"}, {"code": "B1"}, {"code": "C1"}]

        single = filter_rows(rows, _config(("code", FilterType.INCLUDE, "A?")))
        char_class = filter_rows(rows, _config(("code", FilterType.INCLUDE, "[AB]1")))

        assert [row["code"] for row in single.passed] == ["A1"]
        assert [row["code"] for row in char_class.passed] == ["A1", "B1"]

    def test_match_is_case_sensitive(self):
        """Test patterns do not match a different case"""
        rows = [{"code": "z001"}, {"code": "Z001"}]

        result = filter_rows(rows, _config(("code", FilterType.EXCLUDE, "Z*")))

        assert [row["code"] for row in result.passed] == ["z001"]

    def test_null_matches_as_empty_string(self):
        """Test NULL field values are matched as ''"""
        include_any = filter_rows(ROWS, _config(("dept", FilterType.INCLUDE, "?*")))
        exclude_empty = filter_rows(ROWS, _config(("dept", FilterType.EXCLUDE, "")))

        assert "X9" not in [row["emp_id"] for row in include_any.passed]
        # Blank patterns are ignored rather than matching ''
        assert len(exclude_empty.passed) == len(ROWS)

    def test_integer_values_matched_as_text(self):
        """Test non-text values are matched by their string form"""
        rows = [{"level": 10}, {"level": 20}, {"level": 3}]

        result = filter_rows(rows, _config(("level", FilterType.INCLUDE, "1*")))

        assert result.passed == [{"level": 10}]

    def test_blank_pattern_skipped_with_warning(self, caplog):
        """Test a blank pattern is skipped and logged"""
        with caplog.at_level(logging.WARNING):
            compiled = compile_rules([FilterRule("emp_id", FilterType.EXCLUDE, "  ")], "staff_master")

        assert compiled == []
        assert "empty pattern" in caplog.text

    def test_partition_preserves_order(self):
        """Test passed and excluded keep the input order"""
        result = filter_rows(ROWS, _config(("dept", FilterType.INCLUDE, "Sales")))

        assert result.passed == [ROWS[0], ROWS[1]]
        assert result.excluded == [ROWS[2], ROWS[3]]


class TestRowPasses:
    """Test row_passes function"""

    def test_no_rules_passes(self):
        assert row_passes({"emp_id": "E001"}, []) is True

    def test_missing_field_treated_as_empty(self):
        """Test a row without the field behaves like a NULL value"""
        rules = compile_rules([FilterRule("dept", FilterType.INCLUDE, "*")])

        assert row_passes({"emp_id": "E001"}, rules) is True


class TestFilterStats:
    """Test FilterStats class"""

    def test_exclusion_rate_percentage(self):
        """Test exclusion rate is a percentage rounded to 2 decimals"""
        stats = FilterStats(table="staff_master", total=3, passed=2, excluded=1)

        assert stats.exclusion_rate == 33.33

    def test_exclusion_rate_empty_table(self):
        """Test an empty table has a zero exclusion rate"""
        assert FilterStats(table="t", total=0, passed=0, excluded=0).exclusion_rate == 0.0

    def test_to_dict(self):
        stats = filter_rows(ROWS, _config(("emp_id", FilterType.EXCLUDE, "Z*")), "staff_master").stats

        assert stats.to_dict() == {
            "table": "staff_master",
            "total": 4,
            "passed": 3,
            "excluded": 1,
            "exclusion_rate": 25.0,
        }
