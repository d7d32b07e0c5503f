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

"""Render pipeline and template loader with directory fallback.

Every render runs four stages over the template text, in this order:

1. :class:`ConditionalProcessor` — ``{% if %}`` blocks
2. :class:`LoopProcessor` — ``{% for %}`` blocks, re-entering the whole
   pipeline for each iteration
3. :class:`VariableResolver` — ``{{ path }}``
4. :class:`FilterPipeline` — ``{{ path | filter }}``

Rendering never raises.  Unresolved placeholders stay in the output
verbatim, and loops over missing or non-sequence values render nothing.

Resolution order when rendering ``engine.render("scoring.txt", ...)``:

1. ``<user_dir>/scoring.txt`` — user's customised version
2. ``<default_dir>/scoring.txt`` — package-shipped default
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, TemplateNotFound

from textplate.templates.conditionals import ConditionalProcessor
from textplate.templates.filters import FilterPipeline
from textplate.templates.limits import RenderLimits, RenderState
from textplate.templates.loops import LoopProcessor
from textplate.templates.variables import VariableResolver

logger = logging.getLogger(__name__)


class _FallbackLoader(BaseLoader):
    """Jinja2 loader that checks user dir first, then default dir."""

    def __init__(
        self,
        user_dir: Path | None = None,
        default_dir: Path | None = None,
    ) -> None:
        self.user_dir = user_dir
        self.default_dir = default_dir

    def get_source(
        self, environment: Environment, template: str,
    ) -> tuple[str, str, callable]:
        for directory in (self.user_dir, self.default_dir):
            if directory is None:
                continue
            path = directory / template
            if path.is_file():
                source = path.read_text(encoding="utf-8")
                mtime = path.stat().st_mtime
                return source, str(path), lambda: path.stat().st_mtime == mtime
        raise TemplateNotFound(template)


class RenderPipeline:
    """The four render stages wired together.

    Args:
        limits: Depth and substitution ceilings for each render call.
    """

    def __init__(self, limits: RenderLimits | None = None) -> None:
        self.limits = limits or RenderLimits()
        self.conditionals = ConditionalProcessor()
        self.loops = LoopProcessor(self._render)
        self.variables = VariableResolver()
        self.filters = FilterPipeline()

    def render(self, template: str, context: Mapping[str, Any] | None = None) -> str:
        """Render *template* against *context*.  Never raises."""
        if not isinstance(template, str) or not template:
            return ""
        state = RenderState(self.limits)
        try:
            return self._render(template, context or {}, state)
        except Exception:
            logger.exception("Template rendering failed, returning template unchanged")
            return template

    def _render(self, template: str, context: Mapping[str, Any], state: RenderState) -> str:
        text = self.conditionals.process(template, context, state)
        text = self.loops.process(text, context, state)
        text = self.variables.process(text, context, state)
        return self.filters.process(text, context, state)


_default_pipeline = RenderPipeline()


def render(
    template: str,
    context: Mapping[str, Any] | None = None,
    *,
    limits: RenderLimits | None = None,
) -> str:
    """Render a template string.

    Usage::

        render("Hello {{ user.name | default('there') }}!", {"user": {}})
        # -> "Hello there!"
    """
    pipeline = _default_pipeline if limits is None else RenderPipeline(limits)
    return pipeline.render(template, context)


class TemplateEngine:
    """Load prompt templates from disk and render them.

    Args:
        user_dir: User override directory (checked first).
        default_dir: Package default directory (fallback).
        limits: Render ceilings; defaults to :class:`RenderLimits`.
    """

    def __init__(
        self,
        user_dir: Path | None = None,
        default_dir: Path | None = None,
        limits: RenderLimits | None = None,
    ) -> None:
        self.user_dir = Path(user_dir).expanduser() if user_dir else None
        self.default_dir = Path(default_dir).expanduser() if default_dir else None
        self._pipeline = RenderPipeline(limits)
        # Only the loader is used; rendering goes through our own pipeline.
        self._env = Environment(
            loader=_FallbackLoader(self.user_dir, self.default_dir),
            keep_trailing_newline=True,
            autoescape=False,
        )

    @property
    def limits(self) -> RenderLimits:
        return self._pipeline.limits

    def get_source(self, template_name: str) -> str:
        """Return the raw text of a template file.

        Raises ``jinja2.TemplateNotFound`` if the template does not
        exist in either directory.
        """
        source, _, _ = self._env.loader.get_source(self._env, template_name)
        return source

    def render(self, template_name: str, **variables: Any) -> str:
        """Render a template file with the given variables.

        Raises ``jinja2.TemplateNotFound`` if the template does not
        exist in either directory.
        """
        return self._pipeline.render(self.get_source(template_name), variables)

    def render_string(
        self, template: str, context: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a template string with this engine's limits."""
        return self._pipeline.render(template, context)

    def has_template(self, template_name: str) -> bool:
        """Check whether a template exists in either directory."""
        try:
            self.get_source(template_name)
            return True
        except TemplateNotFound:
            return False
