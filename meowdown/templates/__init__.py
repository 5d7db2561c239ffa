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

"""Template engine: parser, node tree, scoped contexts, functions, layouts.

Usage::

    from meowdown.templates import ControlBlockParser, TemplateContext, render

    parser = ControlBlockParser(session.functions)
    tree = parser.parse("{{ if title }}<h1>{{ title }}</h1>{{ endif }}")
    html = render(tree, TemplateContext(), session)
"""

from meowdown.templates.context import TemplateContext, substitute, substitute_all
from meowdown.templates.fragments import FragmentEngine
from meowdown.templates.frontmatter import Document, FrontMatterError, parse_document
from meowdown.templates.functions import FunctionRegistry, default_registry
from meowdown.templates.layouts import (
    DirectoryLayoutLoader,
    LayoutCycleError,
    LayoutError,
    LayoutNotFoundError,
    LayoutPolicy,
    LayoutResolver,
)
from meowdown.templates.nodes import (
    Composite,
    ForEachBlock,
    FuncCall,
    IfBlock,
    Layout,
    Literal,
    Node,
    Page,
    describe_tree,
)
from meowdown.templates.parser import ControlBlockParser
from meowdown.templates.renderer import apply_substitutions, render
from meowdown.templates.urls import has_protocol, relative_url

__all__ = [
    "Composite",
    "ControlBlockParser",
    "DirectoryLayoutLoader",
    "Document",
    "ForEachBlock",
    "FragmentEngine",
    "FrontMatterError",
    "FuncCall",
    "FunctionRegistry",
    "IfBlock",
    "Layout",
    "LayoutCycleError",
    "LayoutError",
    "LayoutNotFoundError",
    "LayoutPolicy",
    "LayoutResolver",
    "Literal",
    "Node",
    "Page",
    "TemplateContext",
    "apply_substitutions",
    "default_registry",
    "describe_tree",
    "has_protocol",
    "parse_document",
    "relative_url",
    "render",
    "substitute",
    "substitute_all",
]
