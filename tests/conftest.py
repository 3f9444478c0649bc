"""
Pytest configuration and fixtures for provisioning sync tests.
Provides a sample configuration, in-memory stores and input loading helpers.
"""

import copy
from pathlib import Path
from typing import Any, Iterable, Mapping

import pytest
from prometheus_client import CollectorRegistry

from provisioning_sync.model import SyncConfig, parse_config
from provisioning_sync.store import SyncStore


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "property: mark test as property-based test")


SAMPLE_CONFIG: dict[str, Any] = {
    "tables": {
        "provided": {
            "name": "staff_info",
            "columns": [
                {"name": "employee_id", "type": "string", "required": True},
                {"name": "name", "type": "string"},
                {"name": "email", "type": "string"},
                {"name": "department", "type": "string"},
                {"name": "note", "type": "string", "include": False},
            ],
            "key_columns": ["employee_id"],
        },
        "current": {
            "name": "staff_master",
            "columns": [
                {"name": "emp_id", "type": "string", "required": True},
                {"name": "full_name", "type": "string"},
                {"name": "mail", "type": "string"},
                {"name": "dept", "type": "string"},
                {"name": "remark", "type": "string"},
            ],
            "key_columns": ["emp_id"],
        },
        "sync_result": {
            "name": "sync_result",
            "columns": [
                {"name": "employee_id", "type": "string"},
                {"name": "name", "type": "string"},
                {"name": "email", "type": "string"},
                {"name": "department", "type": "string"},
            ],
            "key_columns": ["employee_id"],
        },
    },
    "column_mappings": {
        "provided_to_current": {
            "employee_id": "emp_id",
            "name": "full_name",
            "email": "mail",
            "department": "dept",
            "note": "remark",
        },
    },
    "sync_result_mapping": {
        "employee_id": {
            "sources": [
                {"source": "provided", "field": "employee_id", "priority": 1},
                {"source": "current", "field": "emp_id", "priority": 2},
            ],
        },
        "name": {
            "sources": [
                {"source": "provided", "field": "name", "priority": 1},
                {"source": "current", "field": "full_name", "priority": 2},
            ],
        },
        "email": {
            "sources": [
                {"source": "provided", "field": "email", "priority": 1},
                {"source": "current", "field": "mail", "priority": 2},
            ],
        },
        "department": {
            "sources": [
                {"source": "provided", "field": "department", "priority": 1},
                {"source": "current", "field": "dept", "priority": 2},
                {"source": "fixed", "value": "UNASSIGNED", "priority": 3},
            ],
        },
    },
    "data_filters": {
        "provided": {"enabled": False, "rules": []},
        "current": {"enabled": False, "rules": [], "excluded_as_keep": False},
    },
}


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_document() -> dict[str, Any]:
    """A fresh, mutable copy of the sample configuration document."""
    return copy.deepcopy(SAMPLE_CONFIG)


@pytest.fixture
def sync_config(config_document: dict[str, Any]) -> SyncConfig:
    """The sample configuration, validated."""
    return parse_config(config_document)


@pytest.fixture
def filtered_config(config_document: dict[str, Any]) -> SyncConfig:
    """Sample configuration excluding Current ids starting with Z, kept as KEEP."""
    config_document["data_filters"]["current"] = {
        "enabled": True,
        "rules": [{"field": "emp_id", "type": "exclude", "pattern": "Z*"}],
        "excluded_as_keep": True,
    }
    return parse_config(config_document)


@pytest.fixture
def store():
    """Private in-memory sync store."""
    with SyncStore() as sync_store:
        yield sync_store


@pytest.fixture
def registry() -> CollectorRegistry:
    """Isolated Prometheus registry."""
    return CollectorRegistry()


def provided_row(employee_id, name=None, email=None, department=None, note=None) -> dict[str, Any]:
    return {"employee_id": employee_id, "name": name, "email": email, "department": department, "note": note}


def current_row(emp_id, full_name=None, mail=None, dept=None, remark=None) -> dict[str, Any]:
    return {"emp_id": emp_id, "full_name": full_name, "mail": mail, "dept": dept, "remark": remark}


def load_inputs(
    store: SyncStore,
    config: SyncConfig,
    provided: Iterable[Mapping[str, Any]],
    current: Iterable[Mapping[str, Any]],
) -> None:
    store.load_table(config.provided, provided)
    store.load_table(config.current, current)


def result_rows(store: SyncStore, config: SyncConfig) -> list[dict[str, Any]]:
    return store.read_rows(config.result.name, config.result_fields + ["sync_action"])
