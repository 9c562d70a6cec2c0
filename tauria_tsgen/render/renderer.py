"""Jinja2 environment for the TypeScript templates."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from ..errors import FatalError

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


class Renderer(Protocol):
    def render(self, template_name: str, **context: object) -> str:
        ...


def jsdoc(lines: Sequence[str], indent: str = "") -> List[str]:
    """Lines of a ``/** ... */`` block, or nothing for an empty doc."""
    if not lines:
        return []
    block = [f"{indent}/**"]
    block.extend(f"{indent} * {line}" if line else f"{indent} *" for line in lines)
    block.append(f"{indent} */")
    return block


class TemplateRenderer:
    """Renders artifacts from ``*.ts.j2`` templates.

    A custom ``templates_dir`` is searched before the bundled templates, so a
    project can override individual files.
    """

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        directories = []
        if templates_dir is not None:
            directories.append(str(templates_dir))
        if str(DEFAULT_TEMPLATES_DIR) not in directories:
            directories.append(str(DEFAULT_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.globals["jsdoc"] = jsdoc

    def render(self, template_name: str, **context: object) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise FatalError(f"Template not found: {exc.name}") from exc
        return template.render(**context).rstrip() + "\n"


__all__ = ["DEFAULT_TEMPLATES_DIR", "Renderer", "TemplateRenderer", "jsdoc"]
