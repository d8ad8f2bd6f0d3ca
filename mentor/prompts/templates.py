"""
Prompt Templates

``str.format``-style templates for the mentor's prompt blocks. Placeholders
are discovered up front so a missing value fails with the template's name
instead of a bare KeyError deep inside ``format``.
"""

from string import Formatter
from typing import Any, Iterable, Mapping, Optional

from mentor.exceptions import PromptTemplateError


def template_fields(text: str) -> frozenset[str]:
    """Top-level placeholder names in a format string (``{a.b}`` -> ``a``)."""
    names = set()
    for _, field_name, _, _ in Formatter().parse(text):
        if not field_name:
            continue
        names.add(field_name.split(".", 1)[0].split("[", 1)[0])
    return frozenset(names)


class PromptTemplate:
    """A named prompt block with ``{placeholder}`` slots and optional defaults."""

    def __init__(self, text: str, name: str = "unnamed", defaults: Optional[Mapping[str, Any]] = None):
        self.text = text.strip()
        self.name = name
        self.defaults = dict(defaults or {})
        self.fields = template_fields(self.text)

    def render(self, **values: Any) -> str:
        merged = {**self.defaults, **values}
        missing = self.fields.difference(merged)
        if missing:
            raise PromptTemplateError(template_name=self.name, missing_vars=sorted(missing))
        return self.text.format(**merged)

    def __repr__(self) -> str:
        return f"PromptTemplate(name={self.name!r}, fields={sorted(self.fields)})"


def bulleted(items: Iterable[str], bullet: str = "-", empty: str = "None") -> str:
    """One ``bullet item`` per line, or ``empty`` when there are no items."""
    lines = [f"{bullet} {item}" for item in items]
    return "\n".join(lines) if lines else empty
