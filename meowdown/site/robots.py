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

"""robots.txt generation from ``data/robots_config.yaml``.

Example config::

    sitemap: https://example.com/assets/sitemap.xml
    crawl_delay: 5
    global_rules:
      disallow: [/drafts/]
    user_agents:
      - user_agents: ["*"]
        allow: [/blog/]
    auto_disallow_non_included_html: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from meowdown.templates.frontmatter import load_data_file


@dataclass
class RobotsUserAgentRules:
    user_agents: list[str]
    allow: list[str] = field(default_factory=list)
    disallow: list[str] = field(default_factory=list)
    crawl_delay: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RobotsUserAgentRules:
        return cls(
            user_agents=list(data.get("user_agents") or []),
            allow=list(data.get("allow") or []),
            disallow=list(data.get("disallow") or []),
            crawl_delay=data.get("crawl_delay"),
        )


@dataclass
class RobotsGlobalRules:
    allow: list[str] = field(default_factory=list)
    disallow: list[str] = field(default_factory=list)


@dataclass
class RobotsConfig:
    crawl_delay: Optional[int] = None
    sitemap: Optional[str] = None
    user_agents: list[RobotsUserAgentRules] = field(default_factory=list)
    global_rules: Optional[RobotsGlobalRules] = None
    auto_disallow_non_included_html: bool = False
    auto_include_generated_html: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RobotsConfig:
        global_rules = data.get("global_rules")
        return cls(
            crawl_delay=data.get("crawl_delay"),
            sitemap=data.get("sitemap"),
            user_agents=[
                RobotsUserAgentRules.from_dict(rule) for rule in data.get("user_agents") or []
            ],
            global_rules=(
                RobotsGlobalRules(
                    allow=list(global_rules.get("allow") or []),
                    disallow=list(global_rules.get("disallow") or []),
                )
                if isinstance(global_rules, dict)
                else None
            ),
            auto_disallow_non_included_html=bool(data.get("auto_disallow_non_included_html")),
            auto_include_generated_html=bool(data.get("auto_include_generated_html")),
        )

    def allowed_paths(self) -> list[str]:
        paths: list[str] = []
        if self.global_rules is not None:
            paths.extend(self.global_rules.allow)
        for rule in self.user_agents:
            paths.extend(rule.allow)
        return paths

    def all_user_agents(self) -> list[str]:
        return sorted({agent for rule in self.user_agents for agent in rule.user_agents})


def load_robots_config(path: Path) -> Optional[RobotsConfig]:
    """Load the robots config at *path*, or ``None`` if there is none."""
    if not path.is_file():
        return None
    return RobotsConfig.from_dict(load_data_file(path) or {})


def _web_path(path: str) -> str:
    return "/" + path.replace("\\", "/").lstrip("/")


def generate_robots_txt(config: RobotsConfig, html_files: list[str]) -> str:
    """Build robots.txt content.

    *html_files* are the generated pages as paths relative to the output
    directory.
    """
    lines: list[str] = []

    if config.sitemap:
        lines += [f"Sitemap: {config.sitemap}", ""]

    if config.global_rules is not None:
        if config.crawl_delay is not None:
            lines.append(f"Crawl-delay: {config.crawl_delay}")
        lines += [f"Allow: {p}" for p in config.global_rules.allow]
        lines += [f"Disallow: {p}" for p in config.global_rules.disallow]
        lines.append("")

    for rule in config.user_agents:
        lines += [f"User-agent: {agent}" for agent in rule.user_agents]
        if rule.crawl_delay is not None:
            lines.append(f"Crawl-delay: {rule.crawl_delay}")
        lines += [f"Allow: {p}" for p in rule.allow]
        if config.auto_include_generated_html:
            lines.append("# Auto-included generated files")
            lines += [f"Allow: {_web_path(p)}" for p in html_files]
            lines.append("")
        lines += [f"Disallow: {p}" for p in rule.disallow]
        lines.append("")

    if config.auto_disallow_non_included_html:
        allowed = config.allowed_paths()
        disallowed = [
            web_path
            for web_path in (_web_path(p) for p in html_files)
            if not any(web_path.startswith(prefix) for prefix in allowed)
        ]
        if disallowed:
            lines.append("# Auto-disallowed generated files")
            for agent in config.all_user_agents():
                lines.append(f"User-agent: {agent}")
                lines += [f"Disallow: {p}" for p in disallowed]
                lines.append("")

    return "".join(f"{line}\n" for line in lines)
