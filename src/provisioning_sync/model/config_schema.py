"""
JSON Schema for sync configuration documents.

Shape checks only; cross references between sections (mapped columns exist,
priorities are unique, ...) are verified by the loader.
"""

COLUMN_SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": ["string", "text", "integer", "int", "date"]},
        "required": {"type": "boolean"},
        "include": {"type": "boolean"},
    },
    "additionalProperties": False,
}

TABLE_SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "columns": {"type": "array", "items": COLUMN_SCHEMA},
        "key_columns": {"type": "array", "items": {"type": "string"}},
    },
    "additionalProperties": False,
}

FILTER_RULE_SCHEMA = {
    "type": "object",
    "required": ["field", "type", "pattern"],
    "properties": {
        "field": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": ["include", "exclude"]},
        "pattern": {"type": "string"},
    },
    "additionalProperties": False,
}

FILTER_SCHEMA = {
    "type": "object",
    "properties": {
        "enabled": {"type": "boolean"},
        "rules": {"type": "array", "items": FILTER_RULE_SCHEMA},
        "excluded_as_keep": {"type": "boolean"},
    },
    "additionalProperties": False,
}

SOURCE_SCHEMA = {
    "type": "object",
    "required": ["source", "priority"],
    "properties": {
        "source": {"type": "string", "enum": ["provided", "current", "fixed"]},
        "field": {"type": "string", "minLength": 1},
        "value": {"type": ["string", "integer", "null"]},
        "priority": {"type": "integer"},
    },
    "additionalProperties": False,
}

LABEL_SCHEMA = {"type": ["string", "integer"]}

CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "provisioning-sync configuration",
    "type": "object",
    "required": ["tables", "column_mappings", "sync_result_mapping"],
    "properties": {
        "tables": {
            "type": "object",
            "required": ["provided", "current", "sync_result"],
            "properties": {
                "provided": TABLE_SCHEMA,
                "current": TABLE_SCHEMA,
                "sync_result": TABLE_SCHEMA,
            },
            "additionalProperties": False,
        },
        "column_mappings": {
            "type": "object",
            "required": ["provided_to_current"],
            "properties": {
                "provided_to_current": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
            },
            "additionalProperties": False,
        },
        "sync_result_mapping": {
            "type": "object",
            "minProperties": 1,
            "additionalProperties": {
                "type": "object",
                "required": ["sources"],
                "properties": {
                    "sources": {"type": "array", "minItems": 1, "items": SOURCE_SCHEMA},
                },
                "additionalProperties": False,
            },
        },
        "data_filters": {
            "type": "object",
            "properties": {
                "provided": FILTER_SCHEMA,
                "current": FILTER_SCHEMA,
            },
            "additionalProperties": False,
        },
        "sync_action_labels": {
            "type": "object",
            "properties": {
                "ADD": LABEL_SCHEMA,
                "UPDATE": LABEL_SCHEMA,
                "DELETE": LABEL_SCHEMA,
                "KEEP": LABEL_SCHEMA,
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
