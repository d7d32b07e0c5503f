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

"""Filtered placeholders: ``{{ path | name }}`` and ``{{ path | name(arg) }}``.

Filters are looked up by name in a module-level registry.  Built-in
filters are registered at import time; applications can add their own
via :func:`register_filter`.

Every filter shares the calling convention::

    filter_func(lookup, args) -> lookup

where ``lookup`` is a :class:`~textplate.templates.context.Resolved` value
or :data:`~textplate.templates.context.UNRESOLVED`, and ``args`` is the
list of parsed literal arguments.  Filters may be chained; an unknown
filter name passes the value through unchanged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from textplate.templates.context import (
    Lookup,
    Resolved,
    Unresolved,
    is_sequence,
    resolve,
    stringify,
)
from textplate.templates.limits import RenderState

logger = logging.getLogger(__name__)

FilterFunc = Callable[[Lookup, list[Any]], Lookup]

FILTER_EXPR_RE = re.compile(
    r"\{\{\s*([\w.]+)\s*((?:\|\s*\w+\s*(?:\([^)]*\))?\s*)+)\}\}"
)
_FILTER_RE = re.compile(r"\|\s*(\w+)\s*(?:\(([^)]*)\))?")
_ARG_RE = re.compile(r"\s*(\"[^\"]*\"|'[^']*'|[^,]+?)\s*(?:,|$)")
_NAME_RE = re.compile(r"\w+")

DEFAULT_JOIN_SEPARATOR = ", "

# Registry: filter name -> function
_FILTERS: dict[str, FilterFunc] = {}


def register_filter(name: str, func: FilterFunc) -> None:
    """Register *func* under *name*, replacing any existing filter."""
    if not _NAME_RE.fullmatch(name):
        raise ValueError(f"Invalid filter name {name!r}: must be a single word")
    _FILTERS[name] = func


def get_filter(name: str) -> FilterFunc | None:
    return _FILTERS.get(name)


def filter_names() -> list[str]:
    """Return names of all registered filters."""
    return sorted(_FILTERS)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def parse_literal(token: str) -> Any:
    """Turn a filter argument token into a Python value.

    Quoted strings lose their quotes; integers, floats and
    ``true``/``false``/``none`` are converted; anything else is kept as
    the bare text.
    """
    token = token.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    lowered = token.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null"):
        return None
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def parse_args(raw: str | None) -> list[Any]:
    if raw is None or not raw.strip():
        return []
    return [parse_literal(m.group(1)) for m in _ARG_RE.finditer(raw) if m.group(1)]


# ---------------------------------------------------------------------------
# Built-in filters
# ---------------------------------------------------------------------------


def _default(lookup: Lookup, args: list[Any]) -> Lookup:
    if isinstance(lookup, Unresolved) or lookup.value is None or lookup.value == "":
        return Resolved(args[0] if args else "")
    return lookup


def _string_filter(transform: Callable[[str], str]) -> FilterFunc:
    def _apply(lookup: Lookup, args: list[Any]) -> Lookup:
        if isinstance(lookup, Unresolved):
            return lookup
        return Resolved(transform(stringify(lookup.value)))

    return _apply


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:].lower()


def _length(lookup: Lookup, args: list[Any]) -> Lookup:
    if isinstance(lookup, Resolved) and (
        isinstance(lookup.value, str) or is_sequence(lookup.value)
    ):
        return Resolved(len(lookup.value))
    return Resolved(0)


def _join(lookup: Lookup, args: list[Any]) -> Lookup:
    if isinstance(lookup, Unresolved) or not is_sequence(lookup.value):
        return lookup
    separator = stringify(args[0]) if args else ""
    return Resolved((separator or DEFAULT_JOIN_SEPARATOR).join(
        stringify(item) for item in lookup.value
    ))


def _register_builtins() -> None:
    register_filter("default", _default)
    register_filter("upper", _string_filter(str.upper))
    register_filter("lower", _string_filter(str.lower))
    register_filter("capitalize", _string_filter(_capitalize))
    register_filter("length", _length)
    register_filter("join", _join)


_register_builtins()


# ---------------------------------------------------------------------------
# Pipeline stage
# ---------------------------------------------------------------------------


def apply_filters(lookup: Lookup, chain: str) -> Lookup:
    """Apply every ``| name(args)`` segment in *chain* to *lookup*."""
    for m in _FILTER_RE.finditer(chain):
        name, raw_args = m.groups()
        func = _FILTERS.get(name)
        if func is None:
            logger.debug("Unknown filter %r, passing value through", name)
            continue
        lookup = func(lookup, parse_args(raw_args))
    return lookup


class FilterPipeline:
    """Resolve and substitute filtered placeholders."""

    def process(
        self,
        template: str,
        context: Mapping[str, Any],
        state: RenderState | None = None,
    ) -> str:
        state = state or RenderState()

        def _replace(m: re.Match[str]) -> str:
            path, chain = m.groups()
            lookup = apply_filters(resolve(context, path), chain)
            if isinstance(lookup, Unresolved) or not state.consume():
                return m.group(0)
            return stringify(lookup.value)

        return FILTER_EXPR_RE.sub(_replace, template)
