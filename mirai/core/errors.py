"""Domain errors raised by the resume builder services.

Routers translate these into HTTP responses; services never build
``HTTPException`` themselves.
"""


class MiraiError(Exception):
    """Base class for errors the API reports back to the user."""


class ExportError(MiraiError):
    """Base class for PDF export failures."""


class ExportPreconditionError(ExportError):
    """The preview page is missing an element the export needs.

    Raised before any style is changed, so there is nothing to restore.
    """


class PdfConversionError(ExportError):
    """The HTML to PDF conversion raised."""


class ExportInProgressError(ExportError):
    """Another export for the same exporter has not finished yet."""


class SaveInProgressError(MiraiError):
    """A save was requested while the previous one is still in flight."""


class ResumeSaveError(MiraiError):
    """The resume could not be written to the database."""


class IdentityProviderError(MiraiError):
    """The identity provider could not describe the signed-in user."""
