"""
Unit tests for SQL injection prevention

Identifiers from the configuration reach SQL text only through
sync_utils.sql_safety; values always travel as bound parameters.
"""

import pytest
from conftest import load_inputs, provided_row, result_rows

from provisioning_sync.engine import reconcile
from provisioning_sync.errors import ConfigurationError
from provisioning_sync.model import parse_config
from provisioning_sync.store import query
from sync_utils.sql_safety import quote_identifier, quote_qualified, validate_identifier

MALICIOUS_IDENTIFIERS = [
    "staff; DROP TABLE users--",
    "name' OR '1'='1",
    'name" OR "1"="1',
    "name UNION SELECT * FROM sqlite_master",
    "name/*comment*/",
    "name\x00",
    "public.staff",
    "1name",
    "名前",
    "",
]


class TestValidateIdentifier:
    """Test validate_identifier function"""

    @pytest.mark.parametrize("identifier", ["staff_info", "_private", "Emp_ID2", "a"])
    def test_valid_identifiers(self, identifier):
        validate_identifier(identifier)

    @pytest.mark.parametrize("identifier", MALICIOUS_IDENTIFIERS)
    def test_reject_injection_attempts(self, identifier):
        with pytest.raises(ValueError):
            validate_identifier(identifier)

    @pytest.mark.parametrize("identifier", ["rowid", "ROWID", "oid", "_rowid_"])
    def test_reject_implicit_rowid_names(self, identifier):
        with pytest.raises(ValueError, match="Reserved"):
            validate_identifier(identifier)


class TestQuoting:
    """Test identifier quoting"""

    def test_quote_identifier(self):
        assert quote_identifier("staff_info") == '"staff_info"'

    def test_quote_qualified(self):
        assert quote_qualified("p", "employee_id") == '"p"."employee_id"'

    def test_quote_rejects_invalid(self):
        with pytest.raises(ValueError):
            quote_identifier('x"; DROP TABLE t; --')


class TestQueryBuilder:
    """Test generated SQL never interpolates values"""

    def test_literal_is_bound(self):
        fragment = query.literal("'); DROP TABLE sync_result; --")

        assert fragment.sql == "?"
        assert fragment.params == ("'); DROP TABLE sync_result; --",)

    def test_fragments_concatenate_params_in_order(self):
        combined = query.coalesce([query.literal("a"), query.non_empty("c", "dept"), query.literal("b")])

        assert combined.sql == 'COALESCE(?, NULLIF("c"."dept", \'\'), ?)'
        assert combined.params == ("a", "b")

    def test_insert_values_uses_placeholders(self):
        sql = query.insert_values("staff_info", ["employee_id", "name"])

        assert sql == 'INSERT INTO "staff_info" ("employee_id", "name") VALUES (?, ?)'

    def test_empty_comparison_predicates(self):
        """Test with no comparison columns every matched pair is unchanged"""
        assert query.null_safe_same([], "p", "c").sql == "1"
        assert query.null_safe_different([], "p", "c").sql == "0"

    def test_builder_rejects_invalid_table(self):
        with pytest.raises(ValueError):
            query.select_columns("staff; DROP TABLE x", ["a"])

    def test_duplicate_keys_query(self):
        sql = query.duplicate_keys("sync_result", ["employee_id"])

        assert sql == (
            'SELECT "employee_id", COUNT(*) AS _sync_occurrences FROM "sync_result" '
            'GROUP BY "employee_id" HAVING COUNT(*) > 1 ORDER BY "employee_id"'
        )


class TestConfigurationIdentifiers:
    """Test hostile identifiers are rejected when the configuration loads"""

    def test_table_name(self, config_document):
        config_document["tables"]["provided"]["name"] = "staff_info; DROP TABLE staff_master"

        with pytest.raises(ConfigurationError) as exc_info:
            parse_config(config_document)

        assert exc_info.value.identifier == "staff_info; DROP TABLE staff_master"

    def test_column_name(self, config_document):
        config_document["tables"]["current"]["columns"].append({"name": 'dept" TEXT); --'})

        with pytest.raises(ConfigurationError, match="Invalid SQL identifier"):
            parse_config(config_document)

    def test_result_field_name(self, config_document):
        config_document["sync_result_mapping"]["x' OR 1=1"] = {
            "sources": [{"source": "fixed", "value": "X", "priority": 1}],
        }

        with pytest.raises(ConfigurationError):
            parse_config(config_document)

    def test_fixed_value_with_sql_is_data(self, config_document, store):
        """Test a fixed value containing SQL is stored verbatim"""
        hostile = "'); DROP TABLE sync_result; --"
        config_document["sync_result_mapping"]["department"]["sources"][2]["value"] = hostile
        config = parse_config(config_document)
        load_inputs(store, config, [provided_row("E001", "Alice")], [])

        reconcile(store, config)

        assert result_rows(store, config)[0]["department"] == hostile
