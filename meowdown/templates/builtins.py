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

"""Built-in template functions.

Registered on every :class:`~meowdown.templates.functions.FunctionRegistry`
that is created with ``builtins=True``.  HTML output goes through the
session's fragment engine so sites can restyle it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from meowdown.templates.frontmatter import FrontMatterError
from meowdown.templates.renderer import render

if TYPE_CHECKING:
    from meowdown.templates.context import TemplateContext
    from meowdown.templates.functions import FunctionRegistry

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
PRETTY_FORMAT = "%c"
DEFAULT_LIST_KEY = "items"


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def uppercase(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    return args[0].upper() if args else ""


def lowercase(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    return args[0].lower() if args else ""


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _now() -> datetime:
    """Local time, separated for testability."""
    return datetime.now()


def date(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    return _now().strftime(DATE_FORMAT)


def datetime_(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    return _now().strftime(DATETIME_FORMAT)


def datetime_pretty(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    return _now().strftime(PRETTY_FORMAT)


def modified_datetime_pretty(
    args: list[str], block: Optional[str], context: TemplateContext, session: Any,
) -> str:
    """Modification time of the page being rendered."""
    source = context.lookup_string("source_path")
    if not source:
        return ""
    try:
        mtime = Path(source).stat().st_mtime
    except OSError:
        logger.warning("Cannot stat %s for modified-datetime-pretty", source)
        return ""
    return datetime.fromtimestamp(mtime).strftime(PRETTY_FORMAT)


# ---------------------------------------------------------------------------
# HTML fragments
# ---------------------------------------------------------------------------


def _labelled(key: str, label: str):
    def fn(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
        value = context.lookup_string(key)
        if value is None:
            return ""
        return session.fragments.render("labelled.html", label=label, value=value)

    fn.__name__ = f"{key}_html"
    return fn


def relative_url(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    if not args:
        return ""
    return session.relative_url(args[0])


def image_html(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    url = context.lookup_string("image")
    if url is None:
        return ""
    return session.fragments.render("image.html", src=session.relative_url(url))


def json_list(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    """Render the sequence under ``args[0]`` (default ``items``) as a list.

    With a block, the block text is returned verbatim for a present
    sequence; per-item templating is what ``foreach`` is for.
    """
    key = args[0] if args else DEFAULT_LIST_KEY
    items = context.lookup_sequence(key)
    if items is None:
        return ""
    if block is not None:
        return block
    records = [item for item in items if isinstance(item, Mapping)]
    return session.fragments.render("item_list.html", items=records)


# ---------------------------------------------------------------------------
# Page listings
# ---------------------------------------------------------------------------


def list_md(args: list[str], block: Optional[str], context: TemplateContext, session: Any) -> str:
    """Build and render every markdown page in a directory.

    ``{{ list_md posts }}`` renders each page with its own layout;
    ``{{ list_md posts post_item }}`` renders each through ``post_item``.
    A page that is already being rendered, such as the listing page itself,
    is skipped.
    """
    if not args:
        logger.warning("list_md requires a directory argument")
        return ""

    directory = session.resolve_path(args[0])
    layout = args[1] if len(args) > 1 else None
    if not directory.is_dir():
        logger.warning("list_md: %s is not a directory", directory)
        return ""

    parts: list[str] = []
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix != ".md":
            continue
        if session.is_rendering(path):
            chain = " -> ".join(str(p) for p in session.rendering_chain)
            logger.warning("list_md: skipping %s, already being rendered (%s)", path, chain)
            continue
        try:
            page = session.build_page(path, layout=layout)
        except (OSError, FrontMatterError) as exc:
            logger.warning("list_md: skipping %s: %s", path, exc)
            continue
        with session.rendering(path):
            parts.append(render(page, context, session))
    return "".join(parts)


def register_builtins(registry: FunctionRegistry) -> None:
    """Register all built-in template functions on *registry*."""
    registry.register("uppercase", uppercase)
    registry.register("lowercase", lowercase)
    registry.register("date", date)
    registry.register("datetime", datetime_)
    registry.register("datetime-pretty", datetime_pretty)
    registry.register("modified-datetime-pretty", modified_datetime_pretty)
    registry.register("date_html", _labelled("date", "Date"))
    registry.register("tags_html", _labelled("tags", "Tags"))
    registry.register("categories_html", _labelled("categories", "Categories"))
    registry.register("relative-url", relative_url)
    registry.register("image_html", image_html)
    registry.register("list_md", list_md)
    registry.register("json_list", json_list)
