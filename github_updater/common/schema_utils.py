"""
JSON schema validation for configuration and persisted option data.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft7Validator

SCHEMA_DIR = Path(__file__).parent.parent / "schema"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load and self-check a schema shipped in github_updater/schema/."""
    schema_path = SCHEMA_DIR / schema_name
    with open(schema_path, 'r', encoding='utf-8') as f:
        schema = json.load(f)
    Draft7Validator.check_schema(schema)
    return schema


def schema_errors(data: Any, schema_name: str) -> List[str]:
    """
    Validate data against a named schema.

    Args:
        data: Decoded JSON value to validate
        schema_name: File name inside the schema directory

    Returns:
        List of "path: message" strings (empty if valid)
    """
    validator = Draft7Validator(load_schema(schema_name))
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(e.path)):
        error_path = '.'.join(str(p) for p in error.path) or '<root>'
        errors.append(f"{error_path}: {error.message}")
    return errors
