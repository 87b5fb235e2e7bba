#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities.

All free-text values that act as lookup keys (tags, visited locations,
countries, cities) go through the same two steps:

    normalize_string: strip and collapse inner whitespace (display form)
    normalize_key: normalize_string + casefold (uniqueness/lookup form)

so that "  New   York" and "new york" resolve to the same row.
"""
from __future__ import annotations

import re
from typing import Any, List, Optional

from .exceptions import ValidationError

_WHITESPACE = re.compile(r"\s+")


class DataValidator:
    """Centralized data validation for database operations."""

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize a string value for storage.

        Args:
            value: Value to normalize

        Returns:
            Stripped string with inner whitespace collapsed, or None
            if the value is None or blank

        Raises:
            ValidationError: If value is not a string
        """
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(
                f"Expected a string, got {type(value).__name__}: {value!r}"
            )
        normalized = _WHITESPACE.sub(" ", value).strip()
        return normalized or None

    @staticmethod
    def normalize_key(value: Any) -> Optional[str]:
        """
        Normalize a string into its case-insensitive lookup key.

        Args:
            value: Value to normalize

        Returns:
            Casefolded normalized string, or None if blank
        """
        normalized = DataValidator.normalize_string(value)
        return normalized.casefold() if normalized else None

    @staticmethod
    def normalize_string_list(values: Any, field_name: str) -> List[str]:
        """
        Normalize a list of strings, dropping blanks and key duplicates.

        Order of first appearance is kept, as is the display form of the
        first occurrence of each key.

        Args:
            values: List of strings (None is treated as empty)
            field_name: Field name for error messages

        Returns:
            List of normalized, deduplicated strings

        Raises:
            ValidationError: If values is not a list or contains non-strings
        """
        if values is None:
            return []
        if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
            raise ValidationError(f"'{field_name}' must be a list of strings")

        seen = set()
        result = []
        for item in values:
            if not isinstance(item, str):
                raise ValidationError(
                    f"'{field_name}' must contain only strings, got {item!r}"
                )
            normalized = DataValidator.normalize_string(item)
            if not normalized:
                continue
            key = normalized.casefold()
            if key in seen:
                continue
            seen.add(key)
            result.append(normalized)
        return result

    @staticmethod
    def require_bool(value: Any, field_name: str) -> bool:
        """
        Accept only real booleans.

        Args:
            value: Value to check
            field_name: Field name for error messages

        Returns:
            The boolean value

        Raises:
            ValidationError: If value is not a bool (0/1 and "true" are rejected)
        """
        if not isinstance(value, bool):
            raise ValidationError(f"'{field_name}' must be a boolean, got {value!r}")
        return value

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert loose textual inputs (query strings, CLI flags) to booleans.

        Args:
            value: Value to convert

        Returns:
            Boolean value or None

        Raises:
            ValidationError: If conversion fails
        """
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes", "on"):
                return True
            if lowered in ("false", "0", "no", "off"):
                return False
            if not lowered:
                return None
        raise ValidationError(f"Cannot convert '{value}' to boolean")
