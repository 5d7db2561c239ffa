"""Tests for meowdown.templates.context."""

from __future__ import annotations

import pytest

from meowdown.templates.context import (
    TemplateContext,
    scalar_to_string,
    split_values,
    substitute,
    substitute_all,
)
from meowdown.templates.nodes import Literal


class TestScalars:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("text", "text"),
            (True, "true"),
            (False, "false"),
            (None, ""),
            (3, "3"),
            (2.5, "2.5"),
            ([1, 2], None),
            ({"a": 1}, None),
        ],
    )
    def test_scalar_to_string(self, value, expected):
        assert scalar_to_string(value) == expected

    def test_split_values(self):
        strings, data = split_values(
            {"a": True, "b": None, "c": 3, "d": [1], "e": {"k": "v"}}
        )
        assert strings == {"a": "true", "b": "", "c": "3"}
        assert data == {"d": [1], "e": {"k": "v"}}


class TestLookup:
    def test_child_shadows_parent(self):
        parent = TemplateContext()
        parent.set_string("title", "outer")
        child = parent.child()
        child.set_string("title", "inner")
        assert child.lookup_string("title") == "inner"
        assert parent.lookup_string("title") == "outer"

    def test_lookup_walks_up(self):
        root = TemplateContext()
        root.set_string("site", "cats")
        leaf = root.child().child()
        assert leaf.lookup_string("site") == "cats"
        assert "site" in leaf
        assert "missing" not in leaf

    def test_siblings_are_isolated(self):
        parent = TemplateContext()
        first = parent.child()
        second = parent.child()
        first.set_string("x", "1")
        assert second.lookup_string("x") is None
        assert parent.lookup_string("x") is None

    def test_empty_string_is_bound(self):
        ctx = TemplateContext()
        ctx.set_string("draft", "")
        assert "draft" in ctx

    def test_lookup_sequence(self):
        parent = TemplateContext()
        parent.set_data("items", [1, 2])
        child = parent.child()
        assert child.lookup_sequence("items") == [1, 2]
        assert child.lookup_sequence("nothing") is None

    def test_non_sequence_shadows_outer_sequence(self):
        parent = TemplateContext()
        parent.set_data("items", [1, 2])
        child = parent.child()
        child.set_data("items", {"not": "a list"})
        assert child.lookup_sequence("items") is None

    def test_front_matter_and_nodes(self):
        ctx = TemplateContext()
        ctx.add_front_matter({"title": "Hi", "layout": "default"})
        ctx.set_node("sidebar", Literal("S"))
        assert ctx.lookup_string("layout") == "default"
        assert ctx.nodes["sidebar"] == Literal("S")

    def test_repr_shows_depth(self):
        ctx = TemplateContext().child()
        ctx.set_string("b", "1")
        ctx.set_string("a", "2")
        assert repr(ctx) == "TemplateContext(keys=['a', 'b'], depth=1)"


class TestSubstitute:
    def test_all_four_spellings(self):
        text = "{{ title }}|{ title }|{{title}}|{title}"
        assert substitute(text, "title", "T") == "T|T|T|T"

    def test_other_keys_untouched(self):
        assert substitute("{{ titles }} {title}", "title", "T") == "{{ titles }} T"

    def test_dotted_keys(self):
        assert substitute("<a>{{ site.url }}</a>", "site.url", "https://x.test") == (
            "<a>https://x.test</a>"
        )

    def test_substitute_all(self):
        text = "{{ a }}-{b}"
        assert substitute_all(text, {"a": "1", "b": "2"}) == "1-2"
