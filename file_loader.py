import io
import os
import asyncio
import logging
from typing import List
from pathlib import Path

import pdfplumber
from pdfminer.pdfdocument import PDFPasswordIncorrect

from errors import DocumentFormatError
from schema import TextFragment

logger = logging.getLogger(__name__)

PDF_MAGIC = b'%PDF-'

# Some producers put junk before the header; readers accept it within the first 1 KiB.
PDF_HEADER_WINDOW = 1024


class FileLoader:
    """Loads statement files and reads the positioned text of each page."""

    SUPPORTED_EXTENSIONS = {'.pdf'}

    def __init__(self, x_tolerance: float = 3, y_tolerance: float = 3):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def load_file(self, file_path: str) -> bytes:
        """
        Read a statement file from disk.

        Args:
            file_path: Path to the file

        Returns:
            Raw file bytes
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        file_ext = Path(file_path).suffix.lower()

        if file_ext not in self.SUPPORTED_EXTENSIONS:
            raise DocumentFormatError(f"Unsupported file type: {file_ext}")

        self.logger.info(f"Loading {file_ext} file: {file_path}")
        return Path(file_path).read_bytes()

    async def extract_pages(self, data: bytes) -> List[List[TextFragment]]:
        """
        Read the text fragments of every page, in page order.

        Each page is parsed in a worker thread; an empty list for a page means
        it carries no text layer.

        Args:
            data: Raw PDF bytes

        Returns:
            One list of fragments per page
        """
        if not data or PDF_MAGIC not in data[:PDF_HEADER_WINDOW]:
            raise DocumentFormatError("Input is not a PDF document")

        pages = {}
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                total_pages = len(pdf.pages)
                self.logger.info(f"Total pages detected: {total_pages}")

                for index, page in enumerate(pdf.pages):
                    pages[index] = await asyncio.to_thread(self._page_fragments, page)
                    self.logger.debug(f"Extracted {len(pages[index])} fragments from page {index + 1}")
        except Exception as e:
            if _is_password_error(e):
                raise DocumentFormatError("PDF is password protected") from e
            raise DocumentFormatError(f"Error reading PDF file: {_describe(e)}") from e

        fragment_count = sum(len(fragments) for fragments in pages.values())
        if fragment_count == 0:
            self.logger.warning("No text extracted from PDF - may need OCR")

        return [pages[index] for index in sorted(pages)]

    def _page_fragments(self, page) -> List[TextFragment]:
        try:
            words = page.extract_words(x_tolerance=self.x_tolerance, y_tolerance=self.y_tolerance)
            height = float(page.height)
            return [
                TextFragment(text=word['text'], x=float(word['x0']), y=height - float(word['bottom']))
                for word in words
            ]
        finally:
            # Drop the page's cached layout so long statements don't accumulate it.
            page.close()


def _underlying_errors(error: BaseException):
    """The error itself plus whatever pdfplumber wrapped or chained inside it."""
    seen = []
    pending = [error]
    while pending:
        current = pending.pop(0)
        if current is None or any(current is s for s in seen):
            continue
        seen.append(current)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
        pending.extend([current.__cause__, current.__context__])
    return seen


def _is_password_error(error: BaseException) -> bool:
    return any(isinstance(e, PDFPasswordIncorrect) for e in _underlying_errors(error))


def _describe(error: BaseException) -> str:
    for e in _underlying_errors(error):
        if str(e):
            return str(e)
    return error.__class__.__name__
