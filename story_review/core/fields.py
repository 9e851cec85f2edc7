"""
Typed field readers for raw JSON records.

The dataset is loosely typed; these helpers pull one field out of a decoded
JSON object and check its shape, raising SchemaError on mismatch. The
`context` dict is passed through to SchemaError (line_id, phase).
"""

from typing import Any, Dict, List, Optional

from story_review.core.errors import SchemaError

_MISSING = object()


def _describe(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return type(value).__name__


def require_mapping(value: Any, what: str, **context) -> Dict[str, Any]:
    """Check that a decoded JSON value is an object."""
    if not isinstance(value, dict):
        raise SchemaError(f"{what}: expected object, got {_describe(value)}", **context)
    return value


def require_str(record: Dict[str, Any], key: str, **context) -> str:
    value = record.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise SchemaError(f"missing field '{key}'", **context)
    if not isinstance(value, str):
        raise SchemaError(f"field '{key}': expected string, got {_describe(value)}", **context)
    return value


def optional_str(record: Dict[str, Any], key: str, **context) -> Optional[str]:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SchemaError(f"field '{key}': expected string, got {_describe(value)}", **context)
    return value


def require_int(record: Dict[str, Any], key: str, **context) -> int:
    value = record.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise SchemaError(f"missing field '{key}'", **context)
    # bool is an int subclass but never a valid id
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"field '{key}': expected integer, got {_describe(value)}", **context)
    return value


def optional_bool(record: Dict[str, Any], key: str, **context) -> Optional[bool]:
    value = record.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise SchemaError(f"field '{key}': expected boolean, got {_describe(value)}", **context)
    return value


def require_list(record: Dict[str, Any], key: str, **context) -> List[Any]:
    value = record.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise SchemaError(f"missing field '{key}'", **context)
    if not isinstance(value, list):
        raise SchemaError(f"field '{key}': expected array, got {_describe(value)}", **context)
    return value


def require_present(record: Dict[str, Any], key: str, **context) -> Any:
    """Return a field of any JSON type, failing only when it is absent."""
    value = record.get(key, _MISSING)
    if value is _MISSING:
        raise SchemaError(f"missing field '{key}'", **context)
    return value
