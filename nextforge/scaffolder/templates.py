"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``nextforge/scaffolder/templates/`` directory and renders them with
entity- or app-specific context data.  Rendering is pure: callers receive
strings (or a ``{relative_path: content}`` mapping for whole trees) and
decide separately when to write them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Undefined variables raise instead of rendering as
    empty strings, so a missing context key surfaces as an error rather than
    as silently broken TypeScript.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"entity/slice.ts.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    # -- Tree rendering ----------------------------------------------------

    def render_tree(
        self,
        template_prefix: str,
        context: dict[str, Any],
        *,
        skip_prefixes: list[str] | None = None,
    ) -> dict[str, str]:
        """Render every ``*.j2`` file under *template_prefix*.

        The directory structure is preserved: ``app/store/index.ts.j2``
        rendered with ``template_prefix="app"`` yields the key
        ``"store/index.ts"``.

        Args:
            template_prefix: Subdirectory inside the template root to scan.
            context: Template context variables.
            skip_prefixes: Relative output paths starting with any of these
                are left out (e.g. ``[".storybook/", "stories/"]``).

        Returns:
            Mapping of relative POSIX output path to rendered content, in
            sorted path order.
        """
        skip_prefixes = skip_prefixes or []
        prefix_path = self.template_dir / template_prefix
        if not prefix_path.is_dir():
            return {}

        rendered: dict[str, str] = {}
        for template_file in sorted(prefix_path.rglob("*.j2")):
            rel = template_file.relative_to(prefix_path).as_posix()
            output_name = rel[: -len(".j2")]
            if any(output_name.startswith(p) for p in skip_prefixes):
                continue
            rendered[output_name] = self.render(f"{template_prefix}/{rel}", context)
        return rendered

    # -- Utility -----------------------------------------------------------

    def has_tree(self, prefix: str) -> bool:
        return (self.template_dir / prefix).is_dir()

