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

"""sitemap.xml generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Optional

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
URLSET_OPEN = (
    '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'
    ' xmlns:xhtml="http://www.w3.org/1999/xhtml">'
)
URLSET_CLOSE = "</urlset>"


class ChangeFrequency(str, Enum):
    ALWAYS = "always"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    NEVER = "never"


@dataclass
class AlternateLink:
    """Alternate language version of a page."""

    url: str
    lang: str


@dataclass
class SitemapEntry:
    """A single ``<url>`` element."""

    loc: str
    lastmod: Optional[datetime] = None
    changefreq: Optional[ChangeFrequency] = None
    priority: Optional[float] = None
    alternates: list[AlternateLink] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.priority is not None:
            self.priority = min(max(self.priority, 0.0), 1.0)

    def add_alternate(self, url: str, lang: str) -> SitemapEntry:
        self.alternates.append(AlternateLink(url=url, lang=lang))
        return self

    def to_xml(self) -> str:
        lines = ["<url>", f"  <loc>{self.loc}</loc>"]
        if self.lastmod is not None:
            lines.append(f"  <lastmod>{self.lastmod.isoformat()}</lastmod>")
        if self.changefreq is not None:
            lines.append(f"  <changefreq>{self.changefreq.value}</changefreq>")
        if self.priority is not None:
            lines.append(f"  <priority>{self.priority:.1f}</priority>")
        for alt in self.alternates:
            lines.append(
                f'  <xhtml:link rel="alternate" hreflang="{alt.lang}" href="{alt.url}"/>'
            )
        lines.append("</url>")
        return "\n".join(lines)

    @classmethod
    def from_mtime(
        cls,
        loc: str,
        mtime: Optional[float],
        changefreq: Optional[ChangeFrequency] = ChangeFrequency.MONTHLY,
    ) -> SitemapEntry:
        """Entry for a page whose source was last modified at *mtime*."""
        lastmod = (
            datetime.fromtimestamp(mtime, tz=UTC) if mtime is not None else datetime.now(tz=UTC)
        )
        return cls(loc=loc, lastmod=lastmod, changefreq=changefreq)


def generate_sitemap_xml(entries: list[SitemapEntry]) -> str:
    return XML_HEADER + URLSET_OPEN + "".join(e.to_xml() for e in entries) + URLSET_CLOSE
