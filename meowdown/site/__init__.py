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

"""Site building: configuration, build session, output generation.

Usage::

    from meowdown.site import SiteConfig, build_site_for_each_variant

    config = SiteConfig.discover()
    for report in build_site_for_each_variant(config):
        print(report.output_dir, len(report.written))
"""

from meowdown.site.builder import (
    BuildReport,
    build_site,
    build_site_for_each_variant,
    clean_output_dir,
    discover_markdown_files,
)
from meowdown.site.config import ConfigError, SiteConfig, load_site_data
from meowdown.site.markdown_html import markdown_to_html
from meowdown.site.robots import RobotsConfig, generate_robots_txt, load_robots_config
from meowdown.site.scaffold import new_project
from meowdown.site.session import BuildSession, get_git_revision
from meowdown.site.sitemap import ChangeFrequency, SitemapEntry, generate_sitemap_xml
from meowdown.site.watch import should_trigger_rebuild, watch_and_rebuild

__all__ = [
    "BuildReport",
    "BuildSession",
    "ChangeFrequency",
    "ConfigError",
    "RobotsConfig",
    "SiteConfig",
    "SitemapEntry",
    "build_site",
    "build_site_for_each_variant",
    "clean_output_dir",
    "discover_markdown_files",
    "generate_robots_txt",
    "generate_sitemap_xml",
    "get_git_revision",
    "load_robots_config",
    "load_site_data",
    "markdown_to_html",
    "new_project",
    "should_trigger_rebuild",
    "watch_and_rebuild",
]
