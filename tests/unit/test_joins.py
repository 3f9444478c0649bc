"""
Unit tests for key matching between Provided and Current tables
"""

import pytest

from provisioning_sync.engine.joins import (
    current_key_pairs,
    join_condition,
    provided_key_pairs,
    validate_key_pairs,
)
from provisioning_sync.errors import ConfigurationError
from provisioning_sync.model import ColumnDef, ColumnMapping, TableSchema

MAPPING = ColumnMapping({"employee_id": "emp_id", "name": "full_name"})


class TestJoinCondition:
    """Test join_condition function"""

    def test_forward_lookup(self):
        """Test Provided keys resolve through the forward mapping"""
        assert join_condition(["employee_id"], MAPPING) == [("employee_id", "emp_id")]

    def test_inverse_lookup(self):
        """Test Current keys resolve through the inverted mapping"""
        assert join_condition(["emp_id"], MAPPING) == [("emp_id", "employee_id")]

    def test_identity_fallback(self):
        """Test unmapped keys join on the same column name"""
        assert join_condition(["company_code"], MAPPING) == [("company_code", "company_code")]

    def test_composite_keys_keep_order(self):
        """Test each key of a composite key produces one pair, in order"""
        pairs = join_condition(["company_code", "employee_id"], MAPPING)

        assert pairs == [("company_code", "company_code"), ("employee_id", "emp_id")]

    def test_forward_wins_over_inverse(self):
        """Test a column both mapped and mapped-to uses the forward entry"""
        mapping = ColumnMapping({"a": "b", "c": "a"})

        assert join_condition(["a"], mapping) == [("a", "b")]

    def test_empty_keys_rejected(self):
        """Test a table without key columns cannot be matched"""
        with pytest.raises(ConfigurationError, match="staff_info declares no key columns"):
            join_condition([], MAPPING, "staff_info")


class TestKeyPairs:
    """Test provided/current pair helpers and validation"""

    def setup_method(self):
        self.provided = TableSchema(
            name="staff_info",
            columns=(ColumnDef("employee_id"), ColumnDef("name")),
            key_columns=("employee_id",),
        )
        self.current = TableSchema(
            name="staff_master",
            columns=(ColumnDef("emp_id"), ColumnDef("full_name")),
            key_columns=("emp_id",),
        )

    def test_pairs_from_both_sides(self):
        assert provided_key_pairs(self.provided, MAPPING) == [("employee_id", "emp_id")]
        assert current_key_pairs(self.current, MAPPING) == [("emp_id", "employee_id")]

    def test_valid_pairs_pass(self):
        validate_key_pairs([("employee_id", "emp_id")], self.provided, self.current)

    def test_unknown_right_column_rejected(self):
        """Test an identity fallback to a missing column is reported"""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_key_pairs([("name", "name")], self.provided, self.current)

        assert exc_info.value.identifier == "name"
        assert "staff_master" in str(exc_info.value)
