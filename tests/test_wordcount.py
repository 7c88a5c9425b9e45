# tests/test_wordcount.py
"""Tests for whitespace word counting."""

import pytest

from writing_tracker.goals.wordcount import count_words


class TestCountWords:
    """Tests for count_words."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_blank_text_is_zero(self, text):
        """Empty and whitespace-only content has no words."""
        assert count_words(text) == 0

    def test_single_word(self):
        assert count_words("hello") == 1

    def test_runs_of_whitespace(self):
        """Any run of whitespace separates two words."""
        assert count_words("a  b\t\tc\n\nd") == 4

    def test_leading_and_trailing_whitespace_ignored(self):
        assert count_words("   a b c   \n") == 3

    def test_markdown_tokens_count_as_words(self):
        """Punctuation attached to or standing between words is a token."""
        assert count_words("# Title\n\n- item one") == 5
