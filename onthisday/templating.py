"""Jinja2 environment for onthisday templates."""

from __future__ import annotations

from importlib import resources

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

_ENV: Environment | None = None

ALLOWED_TAGS = [
    "h1", "h2", "h3", "h4", "p", "hr", "br", "a", "img",
    "ul", "ol", "li", "strong", "em", "b", "i", "code", "pre", "blockquote",
]
ALLOWED_ATTRS = {"a": ["href", "title"], "img": ["src", "alt", "title"]}


def _render_markdown(value: str | None) -> Markup:
    """Render markdown to sanitised HTML."""
    if not value:
        return Markup("")

    from markdown_it import MarkdownIt
    import bleach

    md = MarkdownIt("commonmark", {"html": False})
    html = md.render(value)

    clean_html = bleach.clean(
        html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRS, strip=True
    )
    clean_html = clean_html.replace("<img ", '<img style="max-width: 320px;" ')

    return Markup(clean_html)


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = resources.files(__package__) / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        _ENV.filters["markdown"] = _render_markdown
    return _ENV
