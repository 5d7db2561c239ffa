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

"""Layout loading, inheritance and caching.

A layout is a template that wraps the output of a page (or of another
layout) through its ``content`` variable.  Each layout names its parent in
its front matter::

    ---
    layout: site
    ---
    <article>{{ content }}</article>

Resolution rules (:class:`LayoutPolicy`):

* an explicit ``layout`` key names the parent; an empty value ends the chain
* otherwise the parent is ``default``, except for the root layouts
  (``default`` and ``site``) which have no implicit parent

Layouts are parsed once per build and cached by name.  The cache is filled
lazily and is not thread-safe; a parallel build needs its own resolver per
worker or a lock around :meth:`LayoutResolver.get_layout`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from meowdown.templates.frontmatter import FrontMatterError, parse_document
from meowdown.templates.nodes import Layout
from meowdown.templates.parser import ControlBlockParser

logger = logging.getLogger(__name__)

LAYOUT_SUFFIX = ".tpl.html"
DEFAULT_PARENT = "default"
ROOT_LAYOUTS = frozenset({"default", "site"})

LayoutLoader = Callable[[str], str]


class LayoutError(Exception):
    """A layout could not be resolved.  Fatal for the build."""


class LayoutNotFoundError(LayoutError):
    """The source of a layout could not be read."""


class LayoutCycleError(LayoutError):
    """A layout is, directly or transitively, its own parent."""


@dataclass(frozen=True)
class LayoutPolicy:
    """Which parent a page or layout inherits when it does not name one."""

    default_parent: str = DEFAULT_PARENT
    root_layouts: frozenset[str] = ROOT_LAYOUTS

    def layout_parent(self, name: str, front_matter: Mapping[str, str]) -> Optional[str]:
        if "layout" in front_matter:
            return front_matter["layout"] or None
        if name == self.default_parent or name in self.root_layouts:
            return None
        return self.default_parent

    def page_parent(self, front_matter: Mapping[str, str]) -> Optional[str]:
        if "layout" in front_matter:
            return front_matter["layout"] or None
        return self.default_parent


class DirectoryLayoutLoader:
    """Read ``<name>.tpl.html`` files from a templates directory.

    With a *variant*, ``<name>.<variant>.tpl.html`` is preferred when it
    exists.
    """

    def __init__(self, templates_dir: str | Path, variant: Optional[str] = None) -> None:
        self.templates_dir = Path(templates_dir)
        self.variant = variant.strip() if variant and variant.strip() else None

    def candidates(self, name: str) -> list[Path]:
        paths = []
        if self.variant:
            paths.append(self.templates_dir / f"{name}.{self.variant}{LAYOUT_SUFFIX}")
        paths.append(self.templates_dir / f"{name}{LAYOUT_SUFFIX}")
        return paths

    def __call__(self, name: str) -> str:
        candidates = self.candidates(name)
        for path in candidates:
            if path.is_file():
                try:
                    return path.read_text(encoding="utf-8")
                except OSError as exc:
                    raise LayoutNotFoundError(
                        f"Failed to read layout {name!r} at {path}: {exc}"
                    ) from exc
        raise LayoutNotFoundError(f"Layout {name!r} not found at {candidates[-1]}")


class LayoutResolver:
    """Resolve layout names to cached :class:`Layout` nodes.

    Args:
        loader: Returns the source text of a layout by name.  Must raise
            :class:`LayoutNotFoundError` for unknown names.
        parser: Parser used for layout bodies.
        policy: Default-parent rules.
    """

    def __init__(
        self,
        loader: LayoutLoader,
        parser: ControlBlockParser,
        policy: Optional[LayoutPolicy] = None,
    ) -> None:
        self.loader = loader
        self.parser = parser
        self.policy = policy or LayoutPolicy()
        self._cache: dict[str, Layout] = {}
        self._resolving: list[str] = []

    def get_layout(self, name: str) -> Layout:
        """Return the layout *name*, loading and caching it on first use.

        Raises :class:`LayoutCycleError` if resolving *name* leads back to
        a layout that is still being resolved.
        """
        cached = self._cache.get(name)
        if cached is not None:
            logger.debug("Layout cache hit: %s", name)
            return cached

        if name in self._resolving:
            chain = self._resolving[self._resolving.index(name):] + [name]
            raise LayoutCycleError(f"Layout cycle detected: {' -> '.join(chain)}")

        self._resolving.append(name)
        try:
            layout = self._load(name)
        finally:
            self._resolving.pop()

        self._cache[name] = layout
        logger.info("Cached layout %s", name)
        return layout

    def _load(self, name: str) -> Layout:
        text = self.loader(name)
        try:
            document = parse_document(text, source=f"layout {name!r}")
        except FrontMatterError as exc:
            raise LayoutError(str(exc)) from exc

        front_matter = dict(document.front_matter)
        parent_name = self.policy.layout_parent(name, front_matter)
        if parent_name is not None:
            front_matter.setdefault("layout", parent_name)
        parent = self.get_layout(parent_name) if parent_name else None

        return Layout(
            name=name,
            front_matter=front_matter,
            content=self.parser.parse(document.body),
            parent=parent,
            data=document.data,
        )

    def is_cached(self, name: str) -> bool:
        return name in self._cache

    def cached_names(self) -> list[str]:
        return list(self._cache.keys())

    def clear(self) -> None:
        self._cache.clear()
