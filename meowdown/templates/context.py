# meowdown: static site generator with a small template language
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Lexically scoped variable lookup for template rendering.

A :class:`TemplateContext` is one frame in a chain.  Lookups check the
frame's own maps first and then walk up through ``parent`` until the root.
A new frame is pushed for every page, every layout hop and every iteration
of a ``foreach`` body; frames are dropped when the render call returns, and
a child never writes into its parent.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from meowdown.templates.nodes import Node


def scalar_to_string(value: Any) -> str | None:
    """Return the template string form of a scalar, or ``None`` for containers.

    Booleans become ``true``/``false`` and ``None`` the empty string, matching
    how they are written in YAML front matter.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple, set)):
        return None
    return str(value)


def split_values(values: Mapping[str, Any]) -> tuple[dict[str, str], dict[str, Any]]:
    """Split a mapping into scalar strings and structured data."""
    strings: dict[str, str] = {}
    data: dict[str, Any] = {}
    for key, value in values.items():
        text = scalar_to_string(value)
        if text is None:
            data[str(key)] = value
        else:
            strings[str(key)] = text
    return strings, data


class TemplateContext:
    """One scope in the context chain.

    Attributes:
        strings: Scalar values, used by ``if`` conditions and interpolation.
        nodes: Named sub-trees rendered on demand during interpolation.
        data: Structured values (sequences of records) used by ``foreach``.
        parent: Enclosing scope, or ``None`` at the root.
    """

    def __init__(self, parent: Optional[TemplateContext] = None) -> None:
        self.strings: dict[str, str] = {}
        self.nodes: dict[str, Node] = {}
        self.data: dict[str, Any] = {}
        self.parent = parent

    def child(self) -> TemplateContext:
        return TemplateContext(parent=self)

    def set_string(self, key: str, value: str) -> None:
        self.strings[key] = value

    def set_node(self, key: str, node: Node) -> None:
        self.nodes[key] = node

    def set_data(self, key: str, value: Any) -> None:
        self.data[key] = value

    def add_front_matter(self, front_matter: Mapping[str, str]) -> None:
        self.strings.update(front_matter)

    def add_data(self, data: Mapping[str, Any]) -> None:
        self.data.update(data)

    def lookup_string(self, key: str) -> str | None:
        scope: Optional[TemplateContext] = self
        while scope is not None:
            if key in scope.strings:
                return scope.strings[key]
            scope = scope.parent
        return None

    def lookup_sequence(self, key: str) -> Sequence[Any] | None:
        """Return the nearest list-valued ``data`` entry named *key*.

        A non-sequence value under *key* shadows outer scopes and yields
        ``None``, the same as a missing key.
        """
        scope: Optional[TemplateContext] = self
        while scope is not None:
            if key in scope.data:
                value = scope.data[key]
                if isinstance(value, (list, tuple)):
                    return value
                return None
            scope = scope.parent
        return None

    def __contains__(self, key: str) -> bool:
        return self.lookup_string(key) is not None

    def __repr__(self) -> str:
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return f"TemplateContext(keys={sorted(self.strings)}, depth={depth})"


# ---------------------------------------------------------------------------
# Textual interpolation
# ---------------------------------------------------------------------------


def substitute(text: str, key: str, value: str) -> str:
    """Replace every interpolation site of *key* in *text* with *value*.

    The accepted spellings are ``{{ key }}``, ``{ key }``, ``{{key}}`` and
    ``{key}``.  Spaced forms go first and double braces before single ones,
    otherwise ``{key}`` would eat the middle of ``{{key}}``.
    """
    for name in (f" {key} ", key):
        for site in (f"{{{{{name}}}}}", f"{{{name}}}"):
            text = text.replace(site, value)
    return text


def substitute_all(text: str, values: Mapping[str, str]) -> str:
    for key, value in values.items():
        text = substitute(text, key, value)
    return text
