# tests/utils/test_sql.py
"""
Tests for SQL utility functions.
"""

from portfolio_ledger.utils.sql import escape_like_pattern, LIKE_ESCAPE_CHAR


class TestEscapeLikePattern:
    """Tests for escape_like_pattern function."""

    def test_escape_percent_wildcard(self):
        assert escape_like_pattern("50%") == "50\\%"

    def test_escape_underscore_in_asset_code(self):
        """Codes such as CASH_001 must not match CASHX001."""
        assert escape_like_pattern("CASH_001") == "CASH\\_001"

    def test_escape_backslash_first(self):
        """Backslash is escaped before wildcards to avoid double escaping."""
        assert escape_like_pattern("\\%") == "\\\\\\%"

    def test_no_escape_needed(self):
        assert escape_like_pattern("AAPL") == "AAPL"

    def test_empty_string(self):
        assert escape_like_pattern("") == ""

    def test_escape_char_is_backslash(self):
        assert LIKE_ESCAPE_CHAR == "\\"
