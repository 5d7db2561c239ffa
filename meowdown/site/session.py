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

"""Build session: the state shared by every parse and render of one build.

A :class:`BuildSession` is created at the start of a build (one per
variant) and passed explicitly to the renderer and to template functions.
It owns the function registry, the layout cache, the site-wide strings and
data, and the fragment engine.  Nothing here is process-global.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from meowdown.site.config import SiteConfig, load_site_data
from meowdown.site.markdown_html import markdown_to_html
from meowdown.templates.context import TemplateContext
from meowdown.templates.fragments import FragmentEngine
from meowdown.templates.frontmatter import FrontMatterError, load_data_file, parse_document
from meowdown.templates.functions import FunctionRegistry, default_registry
from meowdown.templates.layouts import DirectoryLayoutLoader, LayoutLoader, LayoutResolver
from meowdown.templates.nodes import Layout, Page
from meowdown.templates.parser import ControlBlockParser
from meowdown.templates.renderer import render
from meowdown.templates.urls import relative_url

logger = logging.getLogger(__name__)

_GIT_TIMEOUT_SECONDS = 10.0


def get_git_revision(cwd: Optional[Path] = None) -> str:
    """Return the short git revision of *cwd*, or ``nogit-<timestamp>``."""
    for args in (["rev-parse", "--short", "HEAD"], ["rev-parse", "HEAD"]):
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=_GIT_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError):
            logger.debug("git %s failed", " ".join(args), exc_info=True)
            continue
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    return f"nogit-{int(time.time())}"


class BuildSession:
    """Per-build state.

    Args:
        config: Site configuration for this build (a single variant).
        functions: Template function registry; built-ins by default.
        site_strings: Site-wide interpolation strings.
        site_data: Site-wide structured data (sequences for ``foreach``).
        layout_loader: Returns layout source by name; reads the site's
            ``templates/`` directory by default.
        fragments: Fragment engine for built-in HTML output.
    """

    def __init__(
        self,
        config: SiteConfig,
        *,
        functions: Optional[FunctionRegistry] = None,
        site_strings: Optional[dict[str, str]] = None,
        site_data: Optional[dict[str, Any]] = None,
        layout_loader: Optional[LayoutLoader] = None,
        fragments: Optional[FragmentEngine] = None,
    ) -> None:
        self.config = config
        self.functions = functions if functions is not None else default_registry()
        self.parser = ControlBlockParser(self.functions)
        loader = layout_loader or DirectoryLayoutLoader(config.templates_dir, config.variant)
        self.layouts = LayoutResolver(loader, self.parser, config.layout_policy())
        self.site_strings: dict[str, str] = dict(site_strings or {})
        self.site_data: dict[str, Any] = dict(site_data or {})
        self.fragments = fragments or FragmentEngine(site_dir=config.fragments_dir)
        self._rendering: list[Path] = []

    @classmethod
    def with_defaults(cls, config: SiteConfig) -> BuildSession:
        """Create a session with site data and the ``build_revision`` string."""
        strings, data = load_site_data(config)
        session = cls(config, site_strings=strings, site_data=data)
        session.site_strings.setdefault("build_revision", get_git_revision(config.base_dir))
        return session

    # --- URLs and paths -----------------------------------------------------

    @property
    def base_url(self) -> str:
        return self.site_strings.get(self.config.base_url_key, "")

    def relative_url(self, path: str) -> str:
        return relative_url(path, self.base_url)

    def resolve_path(self, path: str | Path) -> Path:
        return self.config.resolve(path)

    def output_path_for(self, source: Path) -> Path:
        """``<input>/blog/post.md`` -> ``<output>/blog/post.html``."""
        try:
            relative = source.resolve().relative_to(self.config.input_path.resolve())
        except ValueError:
            relative = Path(source.name)
        return self.config.output_path / relative.with_suffix(".html")

    # --- Templates ----------------------------------------------------------

    def get_layout(self, name: str) -> Layout:
        return self.layouts.get_layout(name)

    def build_page(self, path: str | Path, layout: Optional[str] = None) -> Page:
        """Build the page node for a markdown source file.

        *layout* overrides the page's own ``layout`` front matter.  Raises
        ``OSError`` if the file cannot be read, :class:`FrontMatterError` for
        malformed front matter and
        :class:`~meowdown.templates.layouts.LayoutError` for layout problems.
        """
        path = Path(path)
        document = parse_document(path.read_text(encoding="utf-8"), source=str(path))

        front_matter = dict(document.front_matter)
        if layout is not None:
            front_matter["layout"] = layout
        front_matter.setdefault("layout", self.config.default_layout)
        front_matter.setdefault("title", path.stem)

        data = dict(document.data)
        data.update(self._load_json_data(front_matter))

        html = markdown_to_html(document.body, self.relative_url)
        parent_name = self.layouts.policy.page_parent(front_matter)
        parent = self.layouts.get_layout(parent_name) if parent_name else None

        return Page(
            path=str(path),
            front_matter=front_matter,
            content=self.parser.parse(html),
            output_path=self.output_path_for(path),
            parent=parent,
            data=data,
        )

    def _load_json_data(self, front_matter: dict[str, str]) -> dict[str, Any]:
        """Sequences from the file named by ``json_data``, if any.

        A top-level list is stored under ``items``; for a mapping, every
        list-valued entry is kept under its own key.
        """
        source = front_matter.get("json_data")
        if not source:
            return {}
        path = self.resolve_path(source)
        try:
            loaded = load_data_file(path)
        except (OSError, FrontMatterError) as exc:
            logger.warning("Cannot load json_data %s: %s", path, exc)
            return {}
        if isinstance(loaded, list):
            return {"items": loaded}
        if isinstance(loaded, dict):
            return {str(k): v for k, v in loaded.items() if isinstance(v, list)}
        return {}

    def root_context(self, page: Page) -> TemplateContext:
        """The outermost scope for rendering *page*."""
        context = TemplateContext()
        context.add_data(self.site_data)
        context.add_front_matter(page.front_matter)
        context.set_string("source_path", page.path)
        return context

    def render_page(self, page: Page) -> str:
        with self.rendering(page.path):
            return render(page, self.root_context(page), self)

    # --- Page nesting -------------------------------------------------------

    @contextmanager
    def rendering(self, path: str | Path) -> Iterator[None]:
        """Mark the page at *path* as being rendered for the duration."""
        self._rendering.append(Path(path).resolve())
        try:
            yield
        finally:
            self._rendering.pop()

    def is_rendering(self, path: str | Path) -> bool:
        """True while the page at *path* is being rendered further up."""
        return Path(path).resolve() in self._rendering

    @property
    def rendering_chain(self) -> list[Path]:
        return list(self._rendering)
