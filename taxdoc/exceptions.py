"""Exception hierarchy for the tax document pipeline.

Missing files are reported with the builtin ``FileNotFoundError``.
"""


class TaxDocError(Exception):
    """Base class for errors raised by this package."""


class ImageDecodeError(TaxDocError):
    """The file exists but could not be decoded as an image."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode image {path}: {reason}")


class OcrUnavailableError(TaxDocError):
    """The OCR capability is missing or failed for every rotation."""


class MatcherConfigError(TaxDocError):
    """A document matcher definition is invalid."""


class UnknownDocumentTypeError(TaxDocError, KeyError):
    """No matcher is registered for the requested document type."""

    def __init__(self, document_type_id: str) -> None:
        self.document_type_id = document_type_id
        super().__init__(f"No matcher registered for document type '{document_type_id}'")

    def __str__(self) -> str:
        return str(self.args[0])
