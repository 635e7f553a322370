# In mirai/tools/pdf_generator.py
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CSS_PX_PER_INCH = 96

# Resume markdown may carry raw HTML; only inline resources are ever loaded
FETCHABLE_URL_SCHEMES = ("data:",)


@dataclass(frozen=True)
class PdfOptions:
    """Fixed layout for exported resumes."""
    filename: str = "resume.pdf"
    page_size: str = "A4"
    orientation: str = "portrait"
    margin_mm: int = 15
    # Raster scale for embedded images, relative to CSS pixels
    scale: int = 2
    jpeg_quality: int = 98

    @property
    def dpi(self) -> int:
        return CSS_PX_PER_INCH * self.scale

    @property
    def page_css(self) -> str:
        # No page background: only what the document itself paints ends up in the PDF
        return f"@page {{ size: {self.page_size} {self.orientation}; margin: {self.margin_mm}mm; }}"


def safe_url_fetcher(url: str, *args, **kwargs):
    """WeasyPrint URL fetcher that refuses everything except ``data:`` URLs.

    Blocks local files (``file:``), attachments pointing at them, and requests
    to internal hosts. WeasyPrint logs the refusal and renders without the resource.
    """
    if not url.strip().lower().startswith(FETCHABLE_URL_SCHEMES):
        logger.warning("Refused to fetch %s while rendering PDF", url)
        raise ValueError(f"URL not allowed in PDF export: {url}")

    from weasyprint import default_url_fetcher

    return default_url_fetcher(url, *args, **kwargs)


def render_pdf(html_content: str, css_content: str, options: PdfOptions = PdfOptions()) -> bytes:
    """Renders HTML and CSS content into PDF bytes using WeasyPrint.

    Errors propagate to the caller, which reports them to the user.
    """
    # Imported lazily: WeasyPrint loads native libraries on import
    from weasyprint import HTML, CSS

    stylesheets = [CSS(string=css_content), CSS(string=options.page_css)]
    # No base_url: relative references must not resolve to the server's working directory
    html = HTML(string=html_content, url_fetcher=safe_url_fetcher)
    pdf = html.write_pdf(
        stylesheets=stylesheets,
        dpi=options.dpi,
        jpeg_quality=options.jpeg_quality,
    )
    logger.info("PDF rendered: %s (%d bytes)", options.filename, len(pdf))
    return pdf
