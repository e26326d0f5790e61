"""Exception taxonomy for statement extraction.

Per-line recognition problems never surface here; they are skipped inside the
extractor. Only document-level failures are raised to the caller.
"""


class StatementExtractionError(Exception):
    """Base class for extraction failures."""

    hint = "The statement could not be processed."

    def __init__(self, message: str = None):
        super().__init__(message or self.hint)


class DocumentFormatError(StatementExtractionError):
    """Input bytes are not a well-formed, supported document."""

    hint = "The file is not a readable PDF statement."


class NoExtractableTextError(StatementExtractionError):
    """The document parsed but exposed no text fragments on any page.

    Usually a scanned or image-only statement that needs an OCR pass first.
    """

    hint = "No text layer found. The statement looks scanned; run OCR on it first."


class NoTransactionsRecognizedError(StatementExtractionError):
    """Text was extracted but no line yielded both a date and an amount."""

    hint = "No transactions recognized. The layout is unsupported; try another export format."
