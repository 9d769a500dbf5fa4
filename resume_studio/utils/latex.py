"""
LaTeX helpers and the resume template registry.

Templates live in resume_studio/templates/resume/*.tex.jinja and use custom
delimiters to avoid conflicts with LaTeX syntax:
- Variable: <<< var >>>
- Block: <%% for ... %%> / <%% endfor %%>
- Comment: <# ... #>
"""

import re
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, Template, TemplateNotFound

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

LATEX_SPECIAL_CHARS = {
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "\\": r"\textbackslash{}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
_LATEX_SPECIAL_RE = re.compile(r"[&%$#_{}\\~^]")

_BULLET_PREFIX_RE = re.compile(r"^[•\-*]\s*")

LINKEDIN_PREFIX = "https://linkedin.com/in/"


def escape_latex(text: Optional[str]) -> str:
    """Escape LaTeX special characters in user-supplied text (single pass)."""
    if not text:
        return ""
    return _LATEX_SPECIAL_RE.sub(lambda m: LATEX_SPECIAL_CHARS[m.group(0)], str(text))


def format_month_year(value: date) -> str:
    return f"{MONTH_ABBR[value.month - 1]} {value.year}"


def format_date_range(start: date, end: Optional[date] = None, is_current: bool = False) -> str:
    """'Jan 2020 -- Present', 'Jan 2020 -- Mar 2022', or just 'Jan 2020'."""
    start_str = format_month_year(start)
    if is_current:
        return f"{start_str} -- Present"
    if end:
        return f"{start_str} -- {format_month_year(end)}"
    return start_str


def format_year(value: Optional[date]) -> str:
    return str(value.year) if value else ""


def bullet_lines(description: Optional[str]) -> List[str]:
    """Split a free-text description into bullet lines, dropping list markers."""
    lines = [line.strip() for line in (description or "").split("\n")]
    return [_BULLET_PREFIX_RE.sub("", line, count=1) for line in lines if line]


def linkedin_handle(url: str) -> str:
    return url.replace(LINKEDIN_PREFIX, "")


class TemplateRegistry:
    """
    Loads and caches Jinja2 templates for LaTeX generation.

    Block tags swallow their own line (trim_blocks / lstrip_blocks) so loops
    emit exactly one LaTeX line per item.
    """

    def __init__(self, templates_path: Path = None):
        self.templates_path = templates_path or TEMPLATES_DIR
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_path)),
            variable_start_string="<<<",
            variable_end_string=">>>",
            block_start_string="<%%",
            block_end_string="%%>",
            comment_start_string="<#",
            comment_end_string="#>",
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self.env.filters["latex"] = escape_latex
        self.env.filters["date_range"] = format_date_range
        self.env.filters["year"] = format_year
        self.env.filters["bullets"] = bullet_lines

    def get_template(self, name: str) -> Template:
        """
        Get a template by name (e.g. 'resume/skills'), loading and caching it.

        Raises:
            TemplateNotFound: If template file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        template_path = f"{name}.tex.jinja"
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template '{name}' not found at {self.templates_path / template_path}"
            ) from e

        self._cache[name] = template
        return template

    def render(self, name: str, **context) -> str:
        return self.get_template(name).render(**context)


_registry: Optional[TemplateRegistry] = None


def get_template_registry() -> TemplateRegistry:
    global _registry
    if _registry is None:
        _registry = TemplateRegistry()
    return _registry
