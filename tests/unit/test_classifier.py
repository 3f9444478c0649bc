"""
Unit tests for the classification passes

Runs the full engine against an in-memory store for each basic scenario and
checks the rows each pass writes.
"""

import pytest
from conftest import current_row, load_inputs, provided_row, result_rows

from provisioning_sync.engine import PASS_ORDER, Classifier, reconcile
from provisioning_sync.errors import ConfigurationError
from provisioning_sync.model import SyncAction, parse_config


def _run(store, config, provided, current):
    load_inputs(store, config, provided, current)
    result = reconcile(store, config)
    return result, result_rows(store, config)


class TestScenarios:
    """One record per scenario"""

    def test_add(self, store, sync_config):
        """Provided only: ADD"""
        result, rows = _run(store, sync_config, [provided_row("E001", "Alice")], [])

        assert rows == [{
            "employee_id": "E001",
            "name": "Alice",
            "email": None,
            "department": "UNASSIGNED",
            "sync_action": "ADD",
        }]
        assert result.action_counts[SyncAction.ADD] == 1

    def test_update_provided_wins(self, store, sync_config):
        """Matched with a differing name: UPDATE with the Provided value"""
        _, rows = _run(
            store, sync_config,
            [provided_row("E001", "Alice")],
            [current_row("E001", "Alicia")],
        )

        assert [(row["employee_id"], row["name"], row["sync_action"]) for row in rows] == [
            ("E001", "Alice", "UPDATE"),
        ]

    def test_update_fills_empty_provided_fields_from_current(self, store, sync_config):
        _, rows = _run(
            store, sync_config,
            [provided_row("E001", "Alice", email="")],
            [current_row("E001", "Alicia", mail="alice@example.com")],
        )

        assert rows[0]["email"] == "alice@example.com"
        assert rows[0]["sync_action"] == "UPDATE"

    def test_delete(self, store, sync_config):
        """Current only: DELETE, resolved from Current"""
        _, rows = _run(store, sync_config, [], [current_row("E002", "Bob", dept="IT")])

        assert rows == [{
            "employee_id": "E002",
            "name": "Bob",
            "email": None,
            "department": "IT",
            "sync_action": "DELETE",
        }]

    def test_keep(self, store, sync_config):
        """Matched and equal: KEEP"""
        _, rows = _run(
            store, sync_config,
            [provided_row("E003", "Carl")],
            [current_row("E003", "Carl")],
        )

        assert [(row["employee_id"], row["name"], row["sync_action"]) for row in rows] == [
            ("E003", "Carl", "KEEP"),
        ]

    def test_null_equals_null_in_comparison(self, store, sync_config):
        """Columns NULL on both sides do not make a record changed"""
        _, rows = _run(
            store, sync_config,
            [provided_row("E003", "Carl", email=None)],
            [current_row("E003", "Carl", mail=None)],
        )

        assert rows[0]["sync_action"] == "KEEP"

    def test_null_differs_from_value(self, store, sync_config):
        _, rows = _run(
            store, sync_config,
            [provided_row("E003", "Carl", email=None)],
            [current_row("E003", "Carl", mail="carl@example.com")],
        )

        assert rows[0]["sync_action"] == "UPDATE"

    def test_non_included_column_ignored(self, store, sync_config):
        """A difference only in an include: false column is still KEEP"""
        _, rows = _run(
            store, sync_config,
            [provided_row("E003", "Carl", note="new")],
            [current_row("E003", "Carl", remark="old")],
        )

        assert rows[0]["sync_action"] == "KEEP"

    def test_empty_inputs(self, store, sync_config):
        result, rows = _run(store, sync_config, [], [])

        assert rows == []
        assert result.total_rows == 0
        assert result.success is True


class TestPassOrder:
    """Mixed inputs produce rows grouped by pass"""

    def test_rows_grouped_by_pass_then_input_order(self, store, sync_config):
        provided = [
            provided_row("E005", "Eve"),
            provided_row("E003", "Carl"),
            provided_row("E001", "Alice"),
            provided_row("E004", "Dan"),
        ]
        current = [
            current_row("E002", "Bob"),
            current_row("E003", "Carl"),
            current_row("E001", "Alicia"),
            current_row("E006", "Fay"),
        ]

        result, rows = _run(store, sync_config, provided, current)

        assert [(row["employee_id"], row["sync_action"]) for row in rows] == [
            ("E005", "ADD"),
            ("E004", "ADD"),
            ("E001", "UPDATE"),
            ("E002", "DELETE"),
            ("E006", "DELETE"),
            ("E003", "KEEP"),
        ]
        assert [result.count(action) for action in PASS_ORDER] == [2, 1, 2, 1]

    def test_custom_labels_written(self, store, config_document):
        config_document["sync_action_labels"] = {"ADD": "A", "UPDATE": "U", "DELETE": "D", "KEEP": "K"}
        config = parse_config(config_document)

        _, rows = _run(store, config, [provided_row("E001", "Alice")], [current_row("E002", "Bob")])

        assert [row["sync_action"] for row in rows] == ["A", "D"]

    def test_integer_labels_keep_their_type(self, store, config_document):
        """Integer codes are stored and read back as integers, not text"""
        config_document["sync_action_labels"] = {"ADD": 1, "UPDATE": 2, "DELETE": 3, "KEEP": 4}
        config = parse_config(config_document)

        _, rows = _run(store, config, [provided_row("E001", "Alice")], [current_row("E002", "Bob")])

        assert [row["sync_action"] for row in rows] == [1, 3]


class TestKeyMatching:
    """Keys whose names differ on each side"""

    def test_null_keys_never_match(self, store, sync_config):
        """A NULL key on both sides yields ADD and DELETE, not a match"""
        _, rows = _run(
            store, sync_config,
            [provided_row(None, "Nobody")],
            [current_row(None, "Nobody")],
        )

        assert sorted(row["sync_action"] for row in rows) == ["ADD", "DELETE"]

    def test_composite_key(self, store, config_document):
        tables = config_document["tables"]
        tables["provided"]["columns"].append({"name": "company"})
        tables["provided"]["key_columns"] = ["company", "employee_id"]
        tables["current"]["columns"].append({"name": "company"})
        tables["current"]["key_columns"] = ["company", "emp_id"]
        tables["sync_result"]["key_columns"] = ["company", "employee_id"]
        config_document["sync_result_mapping"]["company"] = {
            "sources": [
                {"source": "provided", "field": "company", "priority": 1},
                {"source": "current", "field": "company", "priority": 2},
            ],
        }
        config = parse_config(config_document)

        _, rows = _run(
            store, config,
            [{**provided_row("E001", "Alice"), "company": "ACME"}],
            [
                {**current_row("E001", "Alice"), "company": "ACME"},
                {**current_row("E001", "Alice"), "company": "GLOBEX"},
            ],
        )

        assert [row["sync_action"] for row in rows] == ["DELETE", "KEEP"]


class TestClassifierConfiguration:
    """Test Classifier construction"""

    def test_missing_key_columns(self, store, config_document):
        config_document["tables"]["current"]["key_columns"] = []
        config = parse_config(config_document)

        with pytest.raises(ConfigurationError, match="staff_master declares no key columns"):
            Classifier(config, store)

    def test_unmapped_key_without_counterpart(self, store, config_document):
        """Test identity fallback to a column the other side lacks"""
        del config_document["column_mappings"]["provided_to_current"]["employee_id"]
        config = parse_config(config_document)

        with pytest.raises(ConfigurationError) as exc_info:
            Classifier(config, store)

        assert exc_info.value.identifier == "employee_id"
