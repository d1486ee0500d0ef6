"""Tests for identifier validation and quoting."""

import pytest
from mvlite.utils.name_validator import (
    validate_name,
    is_valid_name,
    quote_identifier,
    InvalidNameError,
)


class TestNameValidator:
    """Test the name validation functions."""

    def test_valid_names(self):
        """Test that valid names pass validation."""
        valid_names = [
            "events_sample",
            "user_1_events_last_30",
            "a",
            "mv2",
        ]

        for name in valid_names:
            validate_name(name)
            assert is_valid_name(name) is True

    def test_empty_name(self):
        """Test that empty names are rejected."""
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("")
        assert "cannot be empty" in str(exc_info.value)

        assert is_valid_name("") is False

    def test_uppercase_names(self):
        """Test that uppercase names are rejected with a suggestion."""
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("EventsSample")
        assert "eventssample" in str(exc_info.value)

    def test_injection_attempts(self):
        """Test that names carrying SQL are rejected."""
        hostile = [
            "events; DROP TABLE source",
            'events"',
            "events--",
            "x) AS SELECT 1",
            "events\x00",
        ]
        for name in hostile:
            with pytest.raises(InvalidNameError):
                validate_name(name)

    def test_invalid_patterns(self):
        """Test names that break the allow-list."""
        for name in ["1events", "_events", "events_", "my-view", "a__b", "with space"]:
            assert is_valid_name(name) is False

    def test_length_limit(self):
        """Test that overly long names are rejected."""
        validate_name("a" * 63)
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("a" * 64)
        assert "63 characters" in str(exc_info.value)

    def test_reserved_prefix(self):
        """Test that SQLite's internal prefix is rejected."""
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("sqlite_stat1")
        assert "reserved" in str(exc_info.value)

    def test_entity_type_in_message(self):
        """Test that the entity type shows up in error messages."""
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("", "table")
        assert "Table name cannot be empty" in str(exc_info.value)


class TestQuoteIdentifier:
    """Test identifier quoting."""

    def test_plain_name(self):
        assert quote_identifier("amount") == '"amount"'

    def test_embedded_quotes_doubled(self):
        assert quote_identifier('a"b') == '"a""b"'

    def test_expression_names(self):
        assert quote_identifier("COUNT(*)") == '"COUNT(*)"'
        assert quote_identifier("select") == '"select"'

    def test_rejects_empty_and_nul(self):
        with pytest.raises(InvalidNameError):
            quote_identifier("")
        with pytest.raises(InvalidNameError):
            quote_identifier("a\x00b")
