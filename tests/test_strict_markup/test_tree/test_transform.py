"""Tests for tree query and transformation helpers."""

import pytest

from strict_markup.tree import Element, add, matches, member, new_element, remove, select, transform


@pytest.fixture
def tree() -> Element:
    """Document used by the transformation tests."""
    return new_element("ul", {"id": "menu"}, [
        new_element("li", {"class": "item first"}, "one"),
        new_element("li", {"class": "item"}, [new_element("em", content="two")]),
        "tail",
    ])


class TestMatches:
    """Test element matching."""

    def test_criteria(self, tree):
        """Test tag, id and class criteria."""
        assert matches(tree, "ul")
        assert matches(tree, id="menu")
        assert matches(tree.content[0], "li", class_=["item", "first"])
        assert not matches(tree.content[1], class_=["item", "first"])
        assert not matches(tree, "ol")

    def test_non_element(self):
        """Test that text never matches."""
        assert not matches("text")
        assert not matches("li", "li")


class TestSelectAndMember:
    """Test selection helpers."""

    def test_select(self, tree):
        """Test document order selection."""
        assert [e.text() for e in select(tree, "li")] == ["one", "two"]
        assert select(tree, class_="first")[0].text() == "one"
        assert select("text", "li") == []

    def test_member(self, tree):
        """Test membership checks."""
        assert member(tree, "em")
        assert not member(tree, "table")


class TestTransform:
    """Test functional tree rewriting."""

    def test_identity(self, tree):
        """Test that an identity function rebuilds an equal tree."""
        assert transform(tree, lambda node: node) == tree

    def test_uppercase_text(self, tree):
        """Test rewriting text nodes."""
        result = transform(tree, lambda n: n.upper() if isinstance(n, str) else n)
        assert result.text() == "ONETWOTAIL"
        assert tree.text() == "onetwotail"

    def test_none_removes(self, tree):
        """Test that returning None drops the node."""
        result = transform(tree, lambda n: None if isinstance(n, str) else n)
        assert result.text() == ""

    def test_parent_before_children(self, tree):
        """Test visit order."""
        seen = []

        def record(node):
            seen.append(node.tag if isinstance(node, Element) else node)
            return node

        transform(tree, record)
        assert seen == ["ul", "li", "one", "li", "em", "two", "tail"]

    def test_remove(self, tree):
        """Test removing matching elements."""
        result = remove(tree, "em")
        assert not member(result, "em")
        assert len(select(result, "li")) == 2

    def test_remove_root(self, tree):
        """Test removing the root element."""
        assert remove(tree, "ul") is None

    def test_add_end_and_begin(self, tree):
        """Test adding content to matching elements."""
        appended = add(tree, "!", class_="first")
        assert appended.content[0].content == ("one", "!")

        prepended = add(tree, ["a", "b"], "begin", "li")
        assert [li.content[:2] for li in select(prepended, "li")] == [("a", "b"), ("a", "b")]

    def test_add_element_matching_criteria(self, tree):
        """Test that added elements are not themselves extended."""
        extra = new_element("li", content="three")
        result = add(tree, extra, tag="ul")
        assert result.content[-1] == extra

    def test_add_invalid_position(self, tree):
        """Test position validation."""
        with pytest.raises(ValueError, match="at must be"):
            add(tree, "x", at="middle")
