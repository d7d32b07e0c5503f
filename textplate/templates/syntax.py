# textplate — Jinja-style text templates for prompts and reports
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

"""Helpers for embedding literal text in templates."""

from __future__ import annotations

import re

MARKERS = ("{{", "}}", "{%", "%}")

_BACKSLASHES_BEFORE_BRACE_RE = re.compile(r"\\+(?=[{}%])")
_ESCAPED_RE = re.compile(r"(\\+)([{}%])")
_SYNTAX_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)


def escape(text: str) -> str:
    """Backslash-escape ``{{``, ``}}``, ``{%`` and ``%}``.

    Every character taking part in a marker gets its own backslash
    (``{{`` becomes ``\\{\\{``).  Overlapping markers such as ``{{{`` are
    escaped as a whole run, so the result never contains a marker.

    Backslashes already in *text* directly before ``{``, ``}`` or ``%`` are
    doubled, so :func:`unescape` can tell them apart from inserted ones.
    """
    marked: set[int] = set()
    for i in range(len(text) - 1):
        if text[i:i + 2] in MARKERS:
            marked.update((i, i + 1))
    doubled = {
        i
        for m in _BACKSLASHES_BEFORE_BRACE_RE.finditer(text)
        for i in range(m.start(), m.end())
    }
    if not marked and not doubled:
        return text

    out: list[str] = []
    for i, ch in enumerate(text):
        if i in marked:
            out.append("\\" + ch)
        elif i in doubled:
            out.append("\\\\")
        else:
            out.append(ch)
    return "".join(out)


def _unescape_run(m: re.Match[str]) -> str:
    # An odd run ends in an inserted backslash; the rest are doubled originals.
    slashes, ch = m.groups()
    return "\\" * (len(slashes) // 2) + ch


def unescape(text: str) -> str:
    """Reverse :func:`escape`.

    ``unescape(escape(t)) == t`` for every string *t*.
    """
    return _ESCAPED_RE.sub(_unescape_run, text)


def has_syntax(text: str) -> bool:
    """Whether *text* contains any interpolation or control-block marker."""
    return bool(_SYNTAX_RE.search(text))
