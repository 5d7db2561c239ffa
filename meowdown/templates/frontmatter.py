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

"""Front matter parsing for pages and layouts.

A document may start with a YAML block fenced by ``---`` lines::

    ---
    title: About
    layout: default
    ---
    Body text...

Scalar values become the document's front matter strings; lists and
mappings are kept apart as structured data for ``foreach`` blocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from meowdown.templates.context import split_values

FENCE = "---"


class FrontMatterError(ValueError):
    """Front matter or a data file could not be parsed."""


@dataclass
class Document:
    """A template source split into front matter, data and body."""

    front_matter: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def split_front_matter(text: str) -> tuple[str, str]:
    """Return ``(front_matter, body)``, both trimmed.

    Text without a leading fence, or with an unterminated one, has no front
    matter and is returned unchanged as the body.
    """
    if not text.startswith(FENCE):
        return "", text
    front, sep, body = text[len(FENCE):].partition(FENCE)
    if not sep:
        return "", text
    return front.strip(), body.strip()


def parse_front_matter(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse a YAML front matter block into a mapping.

    Raises :class:`FrontMatterError` naming *source* if the YAML is invalid
    or is not a mapping.
    """
    if not text:
        return {}
    try:
        values = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid front matter in {source}: {exc}") from exc
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise FrontMatterError(
            f"Front matter in {source} must be a mapping, got {type(values).__name__}"
        )
    return values


def parse_document(text: str, source: str = "<string>") -> Document:
    """Split *text* and parse its front matter into a :class:`Document`."""
    front, body = split_front_matter(text)
    strings, data = split_values(parse_front_matter(front, source))
    return Document(front_matter=strings, data=data, body=body)


def load_data_file(path: str | Path) -> Any:
    """Load a YAML (or JSON) data file.

    Raises :class:`FrontMatterError` if the file cannot be parsed;
    ``OSError`` propagates if it cannot be read.
    """
    path = Path(path)
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Failed to parse YAML in {path}: {exc}") from exc
