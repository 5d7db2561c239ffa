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

"""HTML fragments emitted by the built-in template functions.

``date_html``, ``image_html`` and ``json_list`` do not hard-code their
markup; they render small Jinja2 files looked up in this order:

1. ``<site>/templates/fragments/<name>``, the site's own version
2. ``meowdown/templates/defaults/fragments/<name>``, shipped with the package

so a site restyles the output by dropping a file of the same name into its
fragments directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, TemplateNotFound

logger = logging.getLogger(__name__)

DEFAULT_FRAGMENT_DIR = Path(__file__).parent / "defaults" / "fragments"
FRAGMENT_SUFFIXES = (".html", ".j2", ".jinja2")


class FragmentEngine:
    """Render fragment files with a site directory overriding the defaults.

    Args:
        site_dir: Per-site fragment directory, searched first.  It does not
            need to exist.
        default_dir: Package fragment directory, the fallback.
    """

    def __init__(
        self,
        site_dir: Optional[Path] = None,
        default_dir: Optional[Path] = DEFAULT_FRAGMENT_DIR,
    ) -> None:
        self.site_dir = Path(site_dir).expanduser() if site_dir else None
        self.default_dir = Path(default_dir).expanduser() if default_dir else None
        search_path = [d for d in (self.site_dir, self.default_dir) if d is not None]
        self._env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(d)) for d in search_path]),
            # Values are page HTML already; escaping would mangle them.
            autoescape=False,
        )

    def render(self, name: str, **variables: Any) -> str:
        """Render fragment *name*.

        Raises ``jinja2.TemplateNotFound`` if neither directory has it.
        """
        return self._env.get_template(name).render(**variables)

    def has_fragment(self, name: str) -> bool:
        try:
            self._env.get_template(name)
        except TemplateNotFound:
            return False
        return True

    def default_fragments(self) -> list[Path]:
        """Fragment files shipped in the default directory."""
        if self.default_dir is None or not self.default_dir.is_dir():
            return []
        return sorted(
            p for p in self.default_dir.iterdir()
            if p.is_file() and p.suffix in FRAGMENT_SUFFIXES
        )

    def install_defaults(self) -> list[Path]:
        """Copy the default fragments into the site directory for editing.

        Fragments the site already has are left alone.  Returns the paths
        that were written.
        """
        if self.site_dir is None:
            return []
        installed: list[Path] = []
        for source in self.default_fragments():
            target = self.site_dir / source.name
            if target.exists():
                continue
            self.site_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(source.read_text(encoding="utf-8"), encoding="utf-8")
            logger.info("Installed fragment %s", target)
            installed.append(target)
        return installed
