"""Export of the resume preview to PDF.

The preview page is shared state: the exporter switches its view, forces a
solid colour scheme onto several elements so the converter gets opaque
backgrounds, converts, and then puts every class list and inline style back.
The restore runs through ``forced_export_styles`` on every exit path.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag
from jinja2 import Environment, select_autoescape

from mirai.core.config import settings
from mirai.core.errors import ExportInProgressError, ExportPreconditionError, PdfConversionError
from mirai.services.preview_page import (
    ExportElements,
    PAGE_CSS,
    View,
    locate_export_elements,
    set_custom_property,
    set_style,
)
from mirai.tools.pdf_generator import PdfOptions, render_pdf

logger = logging.getLogger(__name__)

FALLBACK_CLASS = "pdf-fallback"

EXPORT_TEMPLATE = """<!DOCTYPE html>
<html lang="en" style="{{ root_style }}">
<head><meta charset="utf-8"><title>{{ title }}</title></head>
<body class="{{ body_class }}" style="{{ body_style }}">{{ target | safe }}</body>
</html>
"""

Converter = Callable[[str, str, PdfOptions], bytes]

LINK_URL_SCHEMES = ("http", "https", "mailto", "tel", "data")
URL_ATTRIBUTES = ("href", "src", "data", "poster", "background", "xlink:href")


@dataclass(frozen=True)
class ExportPalette:
    background: str = settings.PDF_BACKGROUND_COLOR
    text: str = settings.PDF_TEXT_COLOR


@dataclass
class _TagSnapshot:
    tag: Tag
    classes: Optional[List[str]]
    style: Optional[str]

    @classmethod
    def take(cls, tag: Tag) -> "_TagSnapshot":
        classes = tag.get("class")
        return cls(tag, list(classes) if classes is not None else None, tag.get("style"))

    def restore(self) -> None:
        for attr, value in (("class", self.classes), ("style", self.style)):
            if value is None:
                if attr in self.tag.attrs:
                    del self.tag[attr]
            else:
                self.tag[attr] = list(value) if attr == "class" else value


def _add_class(tag: Tag, name: str) -> None:
    classes = list(tag.get("class") or [])
    if name not in classes:
        classes.append(name)
    tag["class"] = classes


def _remove_class(tag: Tag, name: str) -> None:
    tag["class"] = [c for c in (tag.get("class") or []) if c != name]


@contextmanager
def forced_export_styles(elements: ExportElements, palette: ExportPalette) -> Iterator[ExportElements]:
    """Snapshot, force the export colour scheme, and always restore on exit."""
    tags = [elements.root, elements.body, elements.wrapper, elements.parent, elements.target]
    if elements.markdown is not None:
        tags.append(elements.markdown)
    snapshots = [_TagSnapshot.take(tag) for tag in tags]

    try:
        # Off-screen instead of display:none so the layout still exists
        _remove_class(elements.parent, "hidden")
        set_style(
            elements.parent,
            position="absolute",
            left="-9999px",
            top="0",
            z_index="-1",
            width="210mm",
            min_height="297mm",
            background_color=palette.background,
        )

        for tag in (elements.body, elements.target, elements.wrapper):
            _add_class(tag, FALLBACK_CLASS)

        # The converter cannot paint transparent or variable-based backgrounds
        set_style(elements.body, background_color=palette.background)
        set_custom_property(elements.root, "--background", palette.background)
        set_style(elements.wrapper, background_color=palette.background)
        set_style(elements.target, background_color=palette.background)
        if elements.markdown is not None:
            set_style(elements.markdown, background=palette.background, color=palette.text)

        yield elements
    finally:
        for snapshot in snapshots:
            snapshot.restore()


def _is_allowed_url(url: str) -> bool:
    url = url.strip()
    if url.startswith("#"):
        return True
    return urlsplit(url).scheme.lower() in LINK_URL_SCHEMES


def strip_unsafe_resources(fragment: str) -> str:
    """Drop attachment links and URLs that would point at the server itself.

    Works on a copy; the live page tree is left untouched.
    """
    soup = BeautifulSoup(fragment, "html.parser")
    for tag in soup.find_all(True):
        rel = tag.get("rel")
        if rel and "attachment" in [r.lower() for r in rel]:
            del tag["rel"]
        for attr in URL_ATTRIBUTES:
            value = tag.get(attr)
            if value is not None and not _is_allowed_url(" ".join(value) if isinstance(value, list) else value):
                del tag[attr]
        srcset = tag.get("srcset")
        if srcset is not None:
            candidates = [c.split()[0] for c in srcset.split(",") if c.strip()]
            if not all(_is_allowed_url(c) for c in candidates):
                del tag["srcset"]
    return str(soup)


def build_export_html(elements: ExportElements, title: str = "Resume") -> str:
    """Standalone document holding only the export target, with the page's root and body styling."""
    env = Environment(autoescape=select_autoescape(["html", "xml"], default_for_string=True))
    return env.from_string(EXPORT_TEMPLATE).render(
        title=title,
        root_style=elements.root.get("style", ""),
        body_class=" ".join(elements.body.get("class") or []),
        body_style=elements.body.get("style", ""),
        target=strip_unsafe_resources(str(elements.target)),
    )


class PdfExporter:
    """Renders a builder's preview to PDF. One export at a time."""

    def __init__(
        self,
        converter: Converter = render_pdf,
        options: PdfOptions = PdfOptions(),
        palette: Optional[ExportPalette] = None,
        render_timeout: float = settings.RENDER_TIMEOUT_SECONDS,
    ):
        self.converter = converter
        self.options = options
        self.palette = palette or ExportPalette()
        self.render_timeout = render_timeout
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def export(self, builder) -> bytes:
        """Export ``builder``'s preview and return the PDF bytes.

        ``builder`` needs ``active_view``, ``page`` and an async ``show(view)``.
        """
        if self._lock.locked():
            raise ExportInProgressError("A PDF export is already in progress")

        async with self._lock:
            original_view = builder.active_view
            switched = original_view != View.PREVIEW
            try:
                if switched:
                    await builder.show(View.PREVIEW)
                await self._wait_rendered(builder.page)

                elements = locate_export_elements(builder.page.soup)
                with forced_export_styles(elements, self.palette):
                    html = build_export_html(elements)
                    return await self._convert(html, PAGE_CSS)
            finally:
                # Only undo our own switch; a view picked while converting stays
                if switched and builder.active_view is View.PREVIEW:
                    await builder.show(original_view)

    async def _wait_rendered(self, page) -> None:
        try:
            await page.wait_rendered(self.render_timeout)
        except asyncio.TimeoutError as e:
            logger.error("PDF generation error: preview did not render within %ss", self.render_timeout)
            raise ExportPreconditionError(
                "Failed to generate PDF. Preview did not finish rendering. Please try again."
            ) from e

    async def _convert(self, html: str, css: str) -> bytes:
        try:
            return await asyncio.to_thread(self.converter, html, css, self.options)
        except Exception as e:
            logger.exception("PDF generation error: %s", e)
            raise PdfConversionError(f"Failed to generate PDF. Error: {e}") from e
