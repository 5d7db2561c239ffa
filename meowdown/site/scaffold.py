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

"""Create a new site project from the package-shipped skeleton."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from meowdown.site.config import CONFIG_FILENAME
from meowdown.templates.fragments import FragmentEngine

logger = logging.getLogger(__name__)

SKELETON_DIR = Path(__file__).parent / "skeleton"

PROJECT_DIRS = ("assets", "data", "templates")
BASE_FILES = ("data/site.yaml", CONFIG_FILENAME, "index.md")
TEMPLATE_FILES = ("templates/default.tpl.html", "assets/style.css")


def _copy_file(relative: str, project_dir: Path) -> Optional[Path]:
    dest = project_dir / relative
    if dest.exists():
        logger.info("Keeping existing %s", dest)
        return None
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text((SKELETON_DIR / relative).read_text(encoding="utf-8"), encoding="utf-8")
    logger.info("Created file: %s", dest)
    return dest


def new_project(
    name: str,
    use_default_template: bool = False,
    parent: Optional[Path] = None,
) -> Path:
    """Create the project directory *name* under *parent* (default: cwd).

    Existing files are never overwritten.  With *use_default_template* the
    default layout, stylesheet and HTML fragments are installed as well.
    Returns the project directory.
    """
    project_dir = (parent or Path.cwd()) / name
    logger.info("Creating new project at %s", project_dir)
    for directory in PROJECT_DIRS:
        (project_dir / directory).mkdir(parents=True, exist_ok=True)

    files = BASE_FILES + (TEMPLATE_FILES if use_default_template else ())
    for relative in files:
        _copy_file(relative, project_dir)

    if use_default_template:
        FragmentEngine(site_dir=project_dir / "templates" / "fragments").install_defaults()
    else:
        logger.warning("No templates were included. Add your own in %s", project_dir / "templates")
    return project_dir
