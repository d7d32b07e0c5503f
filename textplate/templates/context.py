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

"""Context lookups and value coercion.

A lookup never raises.  It returns either :class:`Resolved` (which may
wrap ``None``) or the :data:`UNRESOLVED` sentinel, so every stage can make
an explicit choice between "substitute" and "leave verbatim".
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final


@dataclass(frozen=True)
class Resolved:
    """A path that resolved to a value (possibly ``None``)."""

    value: Any


class Unresolved:
    """Marker for a path that could not be resolved."""

    _instance: Unresolved | None = None

    def __new__(cls) -> Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED: Final = Unresolved()

Lookup = Resolved | Unresolved


def is_sequence(value: Any) -> bool:
    """True for lists, tuples and other non-string sequences."""
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def resolve(context: Mapping[str, Any], path: str) -> Lookup:
    """Resolve a dotted *path* against *context*.

    Each segment is a key into a mapping, or an integer index into a
    sequence.  Any missing segment yields :data:`UNRESOLVED`.
    """
    current: Any = context
    for part in path.strip().split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return UNRESOLVED
            current = current[part]
        elif is_sequence(current) and part.isdecimal():
            index = int(part)
            if index >= len(current):
                return UNRESOLVED
            current = current[index]
        else:
            return UNRESOLVED
    return Resolved(current)


def is_truthy(lookup: Lookup) -> bool:
    if isinstance(lookup, Unresolved):
        return False
    return bool(lookup.value)


def stringify(value: Any) -> str:
    """Canonical text form of a context value.

    Sequences become comma-separated, mappings ``key: value`` pairs, and
    booleans lowercase so output does not depend on Python's ``repr``.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return ", ".join(f"{k}: {stringify(v)}" for k, v in value.items())
    if is_sequence(value):
        return ", ".join(stringify(v) for v in value)
    return str(value)


def derive(context: Mapping[str, Any], name: str, value: Any) -> dict[str, Any]:
    """Shallow copy of *context* with *name* bound to *value*."""
    scope = dict(context)
    scope[name] = value
    return scope
