# catalog/ingestors/base.py
"""
Base ingestor functionality and shared utilities.
"""
import json
from typing import Dict, Any
from catalog.core.logging import get_logger

logger = get_logger(__name__)


class IngestorError(Exception):
    """Base exception for ingestor errors."""

    pass


class SourceError(IngestorError):
    """Exception raised for errors in data sources."""

    pass


class ValidationError(IngestorError):
    """Exception raised for data validation errors."""

    pass


def validate_json(data: str) -> Dict[str, Any]:
    """
    Validate and parse a JSON object.

    Args:
        data: JSON string to validate

    Returns:
        Parsed JSON data as dictionary

    Raises:
        ValidationError: If the data is not valid JSON or not an object
    """
    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(f"Invalid JSON data: {str(e)}")
    if not isinstance(parsed, dict):
        raise ValidationError(f"Expected JSON object, got {type(parsed).__name__}")
    return parsed


def chunked(items, size: int):
    """Yield consecutive slices of at most `size` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]
