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

"""Site URL rewriting."""

from __future__ import annotations


def has_protocol(url: str) -> bool:
    """Return True if *url* starts with a scheme such as ``https:``.

    The scheme is the text before the first colon and must be non-empty
    and made of ASCII letters only.
    """
    scheme, sep, _ = url.partition(":")
    return bool(sep) and bool(scheme) and scheme.isascii() and scheme.isalpha()


def relative_url(path: str, base_url: str) -> str:
    """Join *path* onto *base_url* with exactly one ``/`` between them.

    Absolute URLs and in-page anchors (``#section``) are returned unchanged.
    """
    if has_protocol(path) or path.startswith("#"):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
