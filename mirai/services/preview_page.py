"""HTML page that hosts the resume preview and the PDF export target.

The page is kept as a BeautifulSoup tree so the exporter can find elements and
change their classes and inline styles in place, the way a browser DOM would
be changed. Every render sets an explicit "render complete" event that callers
await instead of sleeping.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import markdown
from bs4 import BeautifulSoup, Tag
from jinja2 import Environment, select_autoescape

from mirai.core.errors import ExportPreconditionError

logger = logging.getLogger(__name__)

EXPORT_TARGET_ID = "resume-pdf"
WRAPPER_SELECTOR = 'div[data-color-mode="light"]'
MARKDOWN_CLASS = "wmde-markdown"

# Theme of the live page; the exporter overrides it while rasterizing
THEME_BACKGROUND = "rgb(37, 37, 37)"
THEME_TEXT = "rgb(251, 251, 251)"
MARKDOWN_STYLE = "background: white; color: black"

PAGE_CSS = """
.hidden { display: none; }
body { margin: 0; font-family: Inter, Helvetica, Arial, sans-serif; }
body.dark { background-color: var(--background); color: %(text)s; }
.wmde-markdown { padding: 16px; line-height: 1.5; }
.wmde-markdown h2 { border-bottom: 1px solid #d0d7de; padding-bottom: 4px; }
.field-error { color: rgb(239, 68, 68); }
""" % {"text": THEME_TEXT}

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en" style="--background: {{ theme_background }}">
<head>
<meta charset="utf-8">
<title>Resume Builder</title>
<style>{{ css | safe }}</style>
</head>
<body class="dark">
<div data-color-mode="light" class="space-y-4">
<h1 class="gradient-title">Resume Builder</h1>
{% if active_view == "edit" %}
<section class="form-view">
{% if errors %}
<ul class="field-errors">
{% for field, message in errors.items() %}<li class="field-error" data-field="{{ field }}">{{ message }}</li>{% endfor %}
</ul>
{% endif %}
<pre class="markdown-source">{{ source }}</pre>
</section>
{% else %}
{% if overridden %}
<div class="override-warning">You will lose edited markdown if you update the form data.</div>
{% endif %}
<div class="border rounded-lg">
<div class="{{ markdown_class }}">{{ body | safe }}</div>
</div>
<div class="hidden">
<div id="{{ target_id }}"><div class="{{ markdown_class }}" style="{{ markdown_style }}">{{ body | safe }}</div></div>
</div>
{% endif %}
</div>
</body>
</html>
"""


class View(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


def _get_env() -> Environment:
    return Environment(autoescape=select_autoescape(["html", "xml"], default_for_string=True))


def markdown_to_html(source: str) -> str:
    return markdown.markdown(source or "", extensions=["extra", "sane_lists"])


def render_page_html(
    source: str,
    active_view: View,
    errors: Optional[Dict[str, str]] = None,
    overridden: bool = False,
) -> str:
    """Render the builder page for the given markdown and view."""
    template = _get_env().from_string(PAGE_TEMPLATE)
    return template.render(
        css=PAGE_CSS,
        theme_background=THEME_BACKGROUND,
        active_view=View(active_view).value,
        source=source,
        body=markdown_to_html(source) if active_view == View.PREVIEW else "",
        errors=errors or {},
        overridden=overridden,
        markdown_class=MARKDOWN_CLASS,
        markdown_style=MARKDOWN_STYLE,
        target_id=EXPORT_TARGET_ID,
    )


class PreviewPage:
    def __init__(self) -> None:
        self.soup = BeautifulSoup("", "html.parser")
        self.view: Optional[View] = None
        self._rendered = asyncio.Event()

    async def render(
        self,
        source: str,
        active_view: View,
        errors: Optional[Dict[str, str]] = None,
        overridden: bool = False,
    ) -> None:
        self._rendered.clear()
        html = await asyncio.to_thread(render_page_html, source, active_view, errors, overridden)
        self.soup = BeautifulSoup(html, "html.parser")
        self.view = View(active_view)
        self._rendered.set()

    @property
    def is_rendered(self) -> bool:
        return self._rendered.is_set()

    async def wait_rendered(self, timeout: float) -> None:
        """Block until the latest render has finished."""
        await asyncio.wait_for(self._rendered.wait(), timeout)

    def html(self) -> str:
        return str(self.soup)


def parse_style(style: Optional[str]) -> Dict[str, str]:
    """Parse an inline ``style`` attribute into an ordered property dict."""
    props: Dict[str, str] = {}
    for decl in (style or "").split(";"):
        if ":" not in decl:
            continue
        name, value = decl.split(":", 1)
        props[name.strip()] = value.strip()
    return props


def format_style(props: Dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in props.items())


def set_style(tag: Tag, **props: str) -> None:
    """Set inline style properties on a tag. Underscores become dashes."""
    current = parse_style(tag.get("style"))
    for name, value in props.items():
        current[name.replace("_", "-")] = value
    tag["style"] = format_style(current)


def set_custom_property(tag: Tag, name: str, value: str) -> None:
    current = parse_style(tag.get("style"))
    current[name] = value
    tag["style"] = format_style(current)


@dataclass
class ExportElements:
    root: Tag
    body: Tag
    wrapper: Tag
    parent: Tag
    target: Tag
    markdown: Optional[Tag] = None


def locate_export_elements(soup: BeautifulSoup) -> ExportElements:
    """Find everything the exporter touches. Raises before anything is changed."""
    target = soup.find(id=EXPORT_TARGET_ID)
    parent = target.parent if target is not None else None
    wrapper = soup.select_one(WRAPPER_SELECTOR)
    root = soup.html
    body = soup.body

    if target is None or parent is None or wrapper is None or root is None or body is None:
        logger.error("PDF generation error: Required elements not found.")
        raise ExportPreconditionError(
            "Failed to generate PDF. Essential content not found. Please try again."
        )

    return ExportElements(
        root=root,
        body=body,
        wrapper=wrapper,
        parent=parent,
        target=target,
        markdown=target.find(class_=MARKDOWN_CLASS),
    )
