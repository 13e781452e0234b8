"""Jinja2 template renderer with fail-closed placeholder resolution."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from ..exceptions import TemplateRenderError

logger = logging.getLogger(__name__)

# ``{{.Name}}`` / ``{{ .User.Name }}`` markers, rewritten to ``{{ Name }}``.
_DOTTED_MARKER = re.compile(
    r"\{\{\s*\.([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\s*\}\}"
)


@dataclass(frozen=True)
class RenderedContent:
    """Rendered message body and subject ("" when the template has none)."""

    body: str
    subject: str = ""


def normalise_markers(source: str) -> str:
    """Rewrite dotted markers to plain Jinja2 expressions."""
    return _DOTTED_MARKER.sub(r"{{ \1 }}", source)


def _single_line(text: str) -> str:
    return " ".join(line.strip() for line in text.splitlines() if line.strip())


class TemplateRenderer:
    """
    Renders template bodies and subjects with Jinja2.

    Values are substituted by their string form with no HTML escaping.
    Any marker naming an unbound variable raises ``TemplateRenderError``
    instead of rendering empty. Templates run in a sandbox with no globals:
    only the bindings are visible by name and Python internals are out of
    reach. Rendered subjects are folded onto one line. Rendering has no
    side effects, so the same inputs always produce the same output.
    """

    def __init__(self) -> None:
        self._env = SandboxedEnvironment(
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        # range, dict, lipsum, cycler, joiner, namespace
        self._env.globals.clear()

    def render(
        self,
        body: str,
        subject: str = "",
        bindings: dict[str, Any] | None = None,
    ) -> RenderedContent:
        context = dict(bindings or {})
        rendered_subject = (
            _single_line(self._render_one(subject, context)) if subject else ""
        )
        return RenderedContent(
            body=self._render_one(body, context),
            subject=rendered_subject,
        )

    def check_syntax(self, source: str) -> None:
        """Parse *source* without rendering it. Raises ``TemplateRenderError``."""
        try:
            self._env.parse(normalise_markers(source))
        except TemplateError as e:
            raise TemplateRenderError(str(e)) from e

    def _render_one(self, source: str, context: dict[str, Any]) -> str:
        try:
            return self._env.from_string(normalise_markers(source)).render(context)
        except TemplateError as e:
            logger.error("Template rendering failed: %s", e)
            raise TemplateRenderError(str(e)) from e


_default_renderer = TemplateRenderer()


def render(
    body: str,
    subject: str = "",
    bindings: dict[str, Any] | None = None,
) -> RenderedContent:
    """Module-level shortcut for :meth:`TemplateRenderer.render`."""
    return _default_renderer.render(body, subject, bindings)
