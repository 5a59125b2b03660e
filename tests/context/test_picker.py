"""Tests for context picker selection."""

from browsing_context.context.picker import ContextSelection, create_short_name
from browsing_context.tree.builder import ContextTreeBuilder


class TestCreateShortName:
    """Tests for create_short_name."""

    def test_first_word_when_multiple_words(self):
        """Test multi-word titles use the first word."""
        assert create_short_name("Python Documentation Index") == "Python"

    def test_truncates_single_long_word(self):
        """Test single long words are cut to max length."""
        assert create_short_name("Supercalifragilisticexpialidocious") == "Supercalifragil"

    def test_truncates_when_first_word_too_long(self):
        """Test the first word is used up to max length, then truncation."""
        assert create_short_name("Extraordinarily long title") == "Extraordinarily"
        assert create_short_name("Extraordinarilyy long title") == "Extraordinarily"

    def test_short_single_word_kept(self):
        """Test short titles are unchanged."""
        assert create_short_name("GitHub") == "GitHub"

    def test_custom_length(self):
        """Test max length is configurable."""
        assert create_short_name("abcdefghij", max_length=4) == "abcd"


class TestContextSelection:
    """Tests for ContextSelection."""

    def setup_method(self):
        """Set up a picker over a small forest."""
        builder = ContextTreeBuilder()
        builder.add_navigation("", "https://a.com", "A")
        builder.add_navigation("https://a.com", "https://a.com/1", "A1")
        builder.add_navigation("", "https://b.com", "B")
        self.selection = ContextSelection(builder.get_all_nodes())

    def test_toggle(self):
        """Test toggling selects and deselects."""
        assert self.selection.toggle("https://b.com") is True
        assert self.selection.is_selected("https://b.com")
        assert self.selection.toggle("https://b.com") is False
        assert self.selection.count == 0

    def test_selected_nodes_in_display_order(self):
        """Test selection is returned in list order, not click order."""
        self.selection.toggle("https://b.com")
        self.selection.toggle("https://a.com")

        assert [n.url for n in self.selection.selected_nodes()] == ["https://a.com", "https://b.com"]

    def test_confirm_label(self):
        """Test confirm label pluralization."""
        assert self.selection.confirm_label() == "Add 0 Nodes"
        self.selection.toggle("https://a.com")
        assert self.selection.confirm_label() == "Add 1 Node"
        self.selection.toggle("https://a.com/1")
        assert self.selection.confirm_label() == "Add 2 Nodes"

    def test_clear(self):
        """Test clearing the selection."""
        self.selection.toggle("https://a.com")
        self.selection.clear()
        assert self.selection.selected_nodes() == []
