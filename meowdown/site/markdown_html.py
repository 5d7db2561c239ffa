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

"""Markdown to HTML conversion with link and image URL rewriting."""

from __future__ import annotations

from collections.abc import Callable
from typing import Optional

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

# The "extra" set without attr_list, whose `{...}` syntax would swallow
# template tags such as `{{ title }}` at the end of headings.
MARKDOWN_EXTENSIONS = [
    "abbr",
    "def_list",
    "fenced_code",
    "footnotes",
    "md_in_html",
    "tables",
    "sane_lists",
    "toc",
]

UrlRewriter = Callable[[str], str]


class _UrlRewriteProcessor(Treeprocessor):
    """Rewrite ``a[href]`` and ``img[src]`` through a callback."""

    def __init__(self, md: markdown.Markdown, rewrite: UrlRewriter) -> None:
        super().__init__(md)
        self.rewrite = rewrite

    def run(self, root):
        for element in root.iter("a"):
            href = element.get("href")
            if href is not None:
                element.set("href", self.rewrite(href))
        for element in root.iter("img"):
            src = element.get("src")
            if src is not None:
                element.set("src", self.rewrite(src))
        return None


class UrlRewriteExtension(Extension):
    def __init__(self, rewrite: UrlRewriter, **kwargs) -> None:
        self.rewrite = rewrite
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # Low priority: run after inline patterns have produced the elements.
        md.treeprocessors.register(_UrlRewriteProcessor(md, self.rewrite), "meowdown_urls", 1)


def markdown_to_html(text: str, rewrite_url: Optional[UrlRewriter] = None) -> str:
    """Convert markdown *text* to HTML, passing link/image URLs through *rewrite_url*."""
    extensions: list = list(MARKDOWN_EXTENSIONS)
    if rewrite_url is not None:
        extensions.append(UrlRewriteExtension(rewrite_url))
    return markdown.markdown(text, extensions=extensions)
