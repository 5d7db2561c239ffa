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

"""Template node tree.

Nodes are frozen dataclasses.  A parsed layout is cached once per build and
shared by every page that inherits from it, so nothing here may be mutated
after construction; front matter is exposed through read-only mapping
proxies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

FrontMatter = Mapping[str, str]
Data = Mapping[str, Any]


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Literal:
    """Plain text, rendered verbatim."""

    text: str


@dataclass(frozen=True)
class Composite:
    """Children rendered in order and concatenated."""

    children: tuple[Node, ...] = ()


@dataclass(frozen=True)
class IfBlock:
    """``{{ if key }} ... {{ else }} ... {{ endif }}``."""

    condition: str
    true_branch: Node
    false_branch: Optional[Node] = None


@dataclass(frozen=True)
class ForEachBlock:
    """``{{ foreach key as item }} ... {{ endforeach }}``."""

    key: str
    item_name: str
    body: Node


@dataclass(frozen=True)
class FuncCall:
    """A call to a registered template function.

    ``block_content`` holds the raw, unparsed text between the call tag and
    its ``end<name>`` tag when the block form is used.
    """

    name: str
    args: tuple[str, ...] = ()
    block_content: Optional[str] = None


@dataclass(frozen=True)
class Layout:
    """A parsed layout template, optionally chained to a parent layout."""

    name: str
    front_matter: FrontMatter
    content: Node
    parent: Optional[Layout] = None
    data: Data = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "front_matter", _freeze(self.front_matter))
        object.__setattr__(self, "data", _freeze(self.data))


@dataclass(frozen=True)
class Page:
    """A content page built from a markdown source file."""

    path: str
    front_matter: FrontMatter
    content: Node
    output_path: Path
    parent: Optional[Layout] = None
    data: Data = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "front_matter", _freeze(self.front_matter))
        object.__setattr__(self, "data", _freeze(self.data))


Node = Union[Page, Layout, IfBlock, ForEachBlock, FuncCall, Literal, Composite]


def _preview(text: str, width: int) -> str:
    return text.replace("\n", "")[:width]


def describe_tree(node: Node, indent: int = 0) -> str:
    """Return an indented outline of *node* for debug output.

    A page or layout with a parent is described from its root layout down,
    since that is the order in which the final output is assembled.
    """
    lines: list[str] = []
    _describe(node, indent, lines)
    return "\n".join(lines)


def _describe(node: Node, indent: int, lines: list[str]) -> None:
    pad = " " * indent
    if isinstance(node, (Page, Layout)) and node.parent is not None:
        _describe(node.parent, indent, lines)
        return

    if isinstance(node, Page):
        lines.append(f"{pad}page {node.path}")
        _describe(node.content, indent + 1, lines)
    elif isinstance(node, Layout):
        lines.append(f"{pad}layout {node.name}")
        _describe(node.content, indent + 1, lines)
    elif isinstance(node, IfBlock):
        lines.append(f"{pad}if {node.condition}")
        lines.append(f"{pad}  then:")
        _describe(node.true_branch, indent + 4, lines)
        if node.false_branch is not None:
            lines.append(f"{pad}  else:")
            _describe(node.false_branch, indent + 4, lines)
    elif isinstance(node, ForEachBlock):
        lines.append(f"{pad}foreach {node.key} as {node.item_name}")
        _describe(node.body, indent + 2, lines)
    elif isinstance(node, FuncCall):
        lines.append(f"{pad}call {node.name} {list(node.args)}")
        if node.block_content is not None:
            lines.append(f"{pad}  block: {_preview(node.block_content, 30)}...")
    elif isinstance(node, Literal):
        lines.append(f"{pad}text {_preview(node.text, 50)!r}")
    elif isinstance(node, Composite):
        lines.append(f"{pad}composite ({len(node.children)} items)")
        for child in node.children:
            _describe(child, indent + 2, lines)
