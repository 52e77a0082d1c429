"""
Jinja2 rendering for generated source files.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import (
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError as JinjaTemplateError,
    TemplateNotFound,
)

from .errors import GeneratorError


class TemplateError(GeneratorError):
    """A template is missing or failed to render."""


def comment_lines(value: str, marker: str = "//") -> str:
    """Prefix every non-blank line of ``value`` with a line-comment marker."""
    return "\n".join(
        f"{marker} {line}" if line.strip() else line for line in str(value).split("\n")
    )


class TemplateEngine:
    """Jinja2 environment configured for emitting source code."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir
        if template_dir is not None and template_dir.is_dir():
            loader = FileSystemLoader(str(template_dir))
        else:
            loader = DictLoader({})

        # Output is source code, so nothing is escaped and every
        # variable a template uses must be supplied
        self.env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["comment"] = comment_lines

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {e.name}") from e
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally backed by a template directory."""
    return TemplateEngine(template_dir)
