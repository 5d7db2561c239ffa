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

"""Site builder: discovers pages, renders them and writes the output tree.

Layout and configuration errors abort the build.  A page with malformed
front matter aborts it too, unless ``skip_invalid_pages`` is set, in which
case the page is logged and reported as skipped.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from meowdown.site.config import ROBOTS_CONFIG_FILE, ConfigError, SiteConfig
from meowdown.site.robots import generate_robots_txt, load_robots_config
from meowdown.site.session import BuildSession
from meowdown.site.sitemap import SitemapEntry, generate_sitemap_xml
from meowdown.templates.frontmatter import FrontMatterError
from meowdown.templates.nodes import describe_tree

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({"assets", "templates", "data"})
MARKDOWN_SUFFIX = ".md"


@dataclass
class BuildReport:
    """Outcome of building one site variant."""

    output_dir: Path
    variant: Optional[str] = None
    written: list[Path] = field(default_factory=list)
    skipped: list[tuple[Path, str]] = field(default_factory=list)


def discover_markdown_files(root: Path) -> list[Path]:
    """Markdown sources under *root*, recursively, in a stable order.

    Names starting with ``_`` and the ``assets``, ``templates`` and ``data``
    directories are skipped.
    """
    if not root.is_dir():
        return []
    found: list[Path] = []
    for entry in sorted(root.iterdir()):
        if entry.name.startswith("_"):
            continue
        if entry.is_dir():
            if entry.name not in IGNORED_DIRS:
                found.extend(discover_markdown_files(entry))
        elif entry.suffix == MARKDOWN_SUFFIX:
            found.append(entry)
    return found


def copy_assets(src: Path, dst: Path) -> None:
    """Copy the site's asset tree into the output directory."""
    if not src.exists():
        logger.info("Input assets dir %s does not exist", src)
        return
    if src.resolve() == dst.resolve():
        logger.info("Assets source and destination are both %s, nothing to copy", src)
        return
    shutil.copytree(src, dst, dirs_exist_ok=True)
    logger.info("Copied assets to %s", dst)


def clean_output_dir(config: SiteConfig) -> None:
    """Delete the output directory of every variant."""
    for variant_config in config.for_each_variant():
        output = variant_config.output_path
        if output.exists():
            shutil.rmtree(output)
            logger.info("Removed %s", output)


def _mtime(path: Path) -> Optional[float]:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


def build_site(config: SiteConfig, session: Optional[BuildSession] = None) -> BuildReport:
    """Build a single variant of the site described by *config*."""
    output_base = config.output_path
    session = session or BuildSession.with_defaults(config)
    report = BuildReport(output_dir=output_base, variant=config.variant)
    output_base.mkdir(parents=True, exist_ok=True)
    logger.info("Outputting to %s", output_base)

    sitemap_entries: list[SitemapEntry] = []
    for source in discover_markdown_files(config.input_path):
        try:
            page = session.build_page(source)
        except FrontMatterError as exc:
            if not config.skip_invalid_pages:
                raise
            logger.error("Skipping %s: %s", source, exc)
            report.skipped.append((source, str(exc)))
            continue

        logger.debug("Page tree:\n%s", describe_tree(page))
        html = session.render_page(page)
        page.output_path.parent.mkdir(parents=True, exist_ok=True)
        page.output_path.write_text(html, encoding="utf-8")
        logger.info("Wrote %s", page.output_path)
        report.written.append(page.output_path)

        relative = page.output_path.relative_to(output_base).as_posix()
        sitemap_entries.append(
            SitemapEntry.from_mtime(session.relative_url(relative), _mtime(source))
        )

    copy_assets(config.assets_dir, output_base / "assets")
    _write_crawler_files(config, output_base, report, sitemap_entries)

    if config.variant:
        logger.info("Site generation for variant %s complete", config.variant)
    else:
        logger.info("Site generation complete")
    return report


def _write_crawler_files(
    config: SiteConfig,
    output_base: Path,
    report: BuildReport,
    sitemap_entries: list[SitemapEntry],
) -> None:
    robots_path = config.resolve(ROBOTS_CONFIG_FILE)
    try:
        robots_config = load_robots_config(robots_path)
    except FrontMatterError as exc:
        raise ConfigError(str(exc)) from exc

    assets_out = output_base / "assets"
    if robots_config is not None and config.generate_robots_txt:
        assets_out.mkdir(parents=True, exist_ok=True)
        (assets_out / "sitemap.xml").write_text(
            generate_sitemap_xml(sitemap_entries), encoding="utf-8",
        )
        html_files = [p.relative_to(output_base).as_posix() for p in report.written]
        (assets_out / "robots.txt").write_text(
            generate_robots_txt(robots_config, html_files), encoding="utf-8",
        )
        logger.info("Generated sitemap.xml and robots.txt")
    elif config.generate_sitemap_xml:
        assets_out.mkdir(parents=True, exist_ok=True)
        (assets_out / "sitemap.xml").write_text(
            generate_sitemap_xml(sitemap_entries), encoding="utf-8",
        )
        logger.info("Generated sitemap.xml")
    else:
        logger.debug("Not generating sitemap.xml or robots.txt")


def build_site_for_each_variant(config: SiteConfig) -> list[BuildReport]:
    """Build every configured variant, each with a fresh session."""
    return [build_site(variant_config) for variant_config in config.for_each_variant()]
