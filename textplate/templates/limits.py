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

"""Render limits and per-call bookkeeping.

Loop bodies re-enter the whole pipeline and nested ``if`` branches are
resolved recursively, so a template with deep nesting or a huge sequence
could otherwise run unbounded.  Two ceilings apply to every render call:

* ``max_depth`` — how many loop bodies and ``if`` branches may be nested
  inside each other.
* ``max_substitutions`` — total placeholders replaced plus loop iterations.

When a ceiling is hit the render fails closed: the output produced so far
is kept and the remaining work is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32
DEFAULT_MAX_SUBSTITUTIONS = 10_000


@dataclass(frozen=True)
class RenderLimits:
    """Ceilings applied to a single render call.

    Attributes:
        max_depth: Maximum nesting of loop bodies and ``if`` branches.
        max_substitutions: Maximum placeholder substitutions plus loop
            iterations across the whole call.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_substitutions: int = DEFAULT_MAX_SUBSTITUTIONS

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_substitutions < 0:
            raise ValueError(
                f"max_substitutions must be >= 0, got {self.max_substitutions}"
            )


class RenderState:
    """Mutable counters for one render call."""

    def __init__(self, limits: RenderLimits | None = None) -> None:
        self.limits = limits or RenderLimits()
        self.depth = 0
        self.substitutions = 0
        self.exhausted = False

    def consume(self) -> bool:
        """Spend one unit of the substitution budget.

        Returns ``False`` once the budget is spent; the caller must then
        leave its construct unrendered.
        """
        if self.substitutions >= self.limits.max_substitutions:
            self._exhaust(
                "substitution limit (%d) reached, leaving the rest unrendered",
                self.limits.max_substitutions,
            )
            return False
        self.substitutions += 1
        return True

    def can_descend(self) -> bool:
        """Whether one more nested block body may be rendered."""
        if self.depth >= self.limits.max_depth:
            self._exhaust(
                "nesting limit (%d) reached, dropping deeper blocks",
                self.limits.max_depth,
            )
            return False
        return True

    @contextmanager
    def nested(self) -> Iterator[None]:
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def _exhaust(self, msg: str, *args: object) -> None:
        # One warning per render call is enough.
        if not self.exhausted:
            logger.warning(msg, *args)
        self.exhausted = True
