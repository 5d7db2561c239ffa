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

"""Tree-walking evaluator for template nodes.

``render(node, context, session)`` turns a node tree into text.  Pages and
layouts push a new scope, render their content, run the interpolation
passes and then hand the result to their parent layout as ``content``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, Union

from meowdown.templates.context import (
    TemplateContext,
    scalar_to_string,
    split_values,
    substitute,
    substitute_all,
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
)

if TYPE_CHECKING:
    from meowdown.templates.functions import FunctionRegistry

logger = logging.getLogger(__name__)


class RenderSession(Protocol):
    """What the renderer needs from the build session."""

    functions: FunctionRegistry
    site_strings: Mapping[str, str]


def render(node: Node, context: TemplateContext, session: RenderSession) -> str:
    """Render *node* in *context* and return the output text."""
    if isinstance(node, Literal):
        return node.text
    if isinstance(node, Composite):
        return "".join(render(child, context, session) for child in node.children)
    if isinstance(node, IfBlock):
        return _render_if(node, context, session)
    if isinstance(node, ForEachBlock):
        return _render_foreach(node, context, session)
    if isinstance(node, FuncCall):
        return session.functions.invoke(
            node.name, list(node.args), node.block_content, context, session,
        )
    if isinstance(node, (Page, Layout)):
        return _render_document(node, context, session)
    raise TypeError(f"Cannot render {type(node).__name__}")


def _render_if(node: IfBlock, context: TemplateContext, session: RenderSession) -> str:
    if context.lookup_string(node.condition) is not None:
        return render(node.true_branch, context, session)
    if node.false_branch is not None:
        return render(node.false_branch, context, session)
    return ""


def _render_foreach(
    node: ForEachBlock, context: TemplateContext, session: RenderSession,
) -> str:
    items = context.lookup_sequence(node.key)
    if items is None:
        return ""

    parts: list[str] = []
    for item in items:
        scope = context.child()
        if isinstance(item, Mapping):
            strings, data = split_values(item)
            scope.strings.update(strings)
            scope.data.update(data)
            for key, value in strings.items():
                scope.set_string(f"{node.item_name}.{key}", value)
        else:
            text = scalar_to_string(item)
            if text is not None:
                scope.set_string(node.item_name, text)
        # Item fields only live in this scope, so they are substituted here
        # rather than in the page-level pass.
        parts.append(substitute_all(render(node.body, scope, session), scope.strings))
    return "".join(parts)


def _render_document(
    node: Union[Page, Layout], context: TemplateContext, session: RenderSession,
) -> str:
    scope = context.child()
    scope.add_front_matter(node.front_matter)
    scope.add_data(node.data)

    output = render(node.content, scope, session)
    output = substitute_all(output, node.front_matter)
    output = apply_substitutions(output, scope, session)

    if node.parent is None:
        return output

    logger.debug(
        "Rendering %s into layout %s",
        node.path if isinstance(node, Page) else node.name,
        node.parent.name,
    )
    layout_scope = scope.child()
    layout_scope.set_string("content", output)
    return render(node.parent, layout_scope, session)


def _mentions(text: str, key: str) -> bool:
    return substitute(text, key, "") != text


def apply_substitutions(
    text: str, context: TemplateContext, session: RenderSession,
) -> str:
    """Substitute values from every scope of the chain, innermost first.

    Each scope contributes its strings, then its named sub-nodes (rendered
    in that scope, and only when the text refers to them).  Site-wide
    strings are applied last.
    """
    scope: TemplateContext | None = context
    while scope is not None:
        text = substitute_all(text, scope.strings)
        for key, sub_node in scope.nodes.items():
            if _mentions(text, key):
                text = substitute(text, key, render(sub_node, scope, session))
        scope = scope.parent
    return substitute_all(text, session.site_strings)
