#!/usr/bin/env python3
"""
tag_manager.py
--------------------
Manages Tag rows: lookup, get-or-create and list resolution.

Tags are plain strings shared by many people. Matching is case-insensitive
and whitespace-insensitive; the first spelling seen is kept for display.

Usage:
    tag_mgr = TagManager(session, logger)

    # Create or get a tag
    tag = tag_mgr.get_or_create("Family")
    assert tag_mgr.get_or_create("  family ") is tag

    # Resolve a request's tag list
    tags = tag_mgr.resolve(["Family", "climbing", "FAMILY"])  # 2 rows
"""
from typing import List, Optional

from friendmap.core.exceptions import ValidationError
from friendmap.core.validators import DataValidator
from friendmap.database.decorators import handle_db_errors, log_database_operation
from friendmap.database.models import Tag
from .base_manager import BaseManager


class TagManager(BaseManager):
    """
    Manages Tag table operations.

    Each tag is a unique (case-insensitive) string that can be associated
    with any number of people.
    """

    @handle_db_errors
    def exists(self, tag_name: str) -> bool:
        """
        Check if a tag exists without raising exceptions.

        Args:
            tag_name: The tag text to check

        Returns:
            True if tag exists, False otherwise
        """
        if not isinstance(tag_name, str):
            return False
        return self._get_by_key(Tag, DataValidator.normalize_key(tag_name)) is not None

    @handle_db_errors
    def get(self, tag_name: str) -> Optional[Tag]:
        """
        Retrieve a tag by text (case-insensitive).

        Args:
            tag_name: The tag text to retrieve

        Returns:
            Tag object if found, None otherwise
        """
        if not isinstance(tag_name, str):
            return None
        return self._get_by_key(Tag, DataValidator.normalize_key(tag_name))

    @handle_db_errors
    def get_by_id(self, tag_id: int) -> Optional[Tag]:
        return self._get_by_id(Tag, tag_id)

    @handle_db_errors
    @log_database_operation("get_all_tags")
    def get_all(self) -> List[Tag]:
        """
        Retrieve all tags ordered case-insensitively by text.

        Returns:
            List of all Tag objects
        """
        return self.session.query(Tag).order_by(Tag.key).all()

    @handle_db_errors
    @log_database_operation("get_or_create_tag")
    def get_or_create(self, tag_name: str) -> Tag:
        """
        Get an existing tag or create it if it doesn't exist.

        Args:
            tag_name: The tag text

        Returns:
            Tag object (existing or newly created)

        Raises:
            ValidationError: If tag_name is empty after normalization
        """
        tag_text = DataValidator.normalize_string(tag_name)
        if not tag_text:
            raise ValidationError("Tag cannot be empty")

        return self._get_or_create(Tag, {"key": tag_text.casefold()}, {"tag": tag_text})

    @handle_db_errors
    def resolve(self, tag_names: List[str]) -> List[Tag]:
        """
        Resolve a list of tag strings to Tag rows, creating missing ones.

        Args:
            tag_names: Raw tag strings from a request

        Returns:
            Tag rows in first-seen order, duplicates (by key) removed,
            blank strings skipped

        Raises:
            ValidationError: If tag_names is not a list of strings
        """
        normalized = DataValidator.normalize_string_list(tag_names, "tags")
        return [self.get_or_create(name) for name in normalized]

    @handle_db_errors
    def get_unused(self) -> List[Tag]:
        """
        Get all tags that are not linked to any person.

        Returns:
            List of unused Tag objects

        Notes:
            - Only ever non-empty between a mutation and its cleanup step,
              or in databases written by something other than friendmap
        """
        return self.session.query(Tag).filter(~Tag.people.any()).order_by(Tag.key).all()
