"""Shared fixtures: fragment builders, a fake page reader and a tiny PDF writer."""

from typing import List, Sequence, Tuple

import pytest

from file_loader import FileLoader
from schema import TextFragment

# (x, y, text) placed on a page
Placement = Tuple[float, float, str]


def row(y: float, *cells: Tuple[float, str]) -> List[TextFragment]:
    """Fragments of one visual row: each cell is (x, text)."""
    return [TextFragment(text=text, x=x, y=y) for x, text in cells]


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(pages: Sequence[Sequence[Placement]], encrypted: bool = False) -> bytes:
    """Write a minimal PDF with one Helvetica text run per placement.

    With ``encrypted`` the trailer carries a standard security handler whose
    keys match no password, so opening it needs a password nobody knows.
    """
    page_count = len(pages)
    # 1 catalog, 2 pages tree, 3 font, then (page, content) pairs
    page_ids = [4 + 2 * i for i in range(page_count)]

    objects = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: ("<< /Type /Pages /Kids [%s] /Count %d >>"
            % (" ".join(f"{pid} 0 R" for pid in page_ids), page_count)).encode("ascii"),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }

    for pid, placements in zip(page_ids, pages):
        content = "".join(
            f"BT /F1 10 Tf {x} {y} Td ({_escape(text)}) Tj ET\n" for x, y, text in placements
        ).encode("latin-1")
        objects[pid] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {pid + 1} 0 R >>"
        ).encode("ascii")
        objects[pid + 1] = b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += b"%d 0 obj\n" % num + objects[num] + b"\nendobj\n"

    xref_offset = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += b"%010d 00000 n \n" % offsets[num]
    encryption = b""
    if encrypted:
        encryption = (
            b" /Encrypt << /Filter /Standard /V 1 /R 2 /P -44"
            b" /O <" + b"AB" * 32 + b"> /U <" + b"CD" * 32 + b"> >>"
            b" /ID [<" + b"01" * 16 + b"> <" + b"01" * 16 + b">]"
        )
    out += b"trailer\n<< /Size %d /Root 1 0 R%s >>\nstartxref\n%d\n%%%%EOF\n" % (size, encryption, xref_offset)
    return bytes(out)


class FakeFileLoader(FileLoader):
    """Serves pre-built page fragments instead of parsing a PDF."""

    def __init__(self, pages):
        super().__init__()
        self.pages = pages

    async def extract_pages(self, data: bytes):
        return self.pages


@pytest.fixture
def statement_pages():
    """Two pages of a typical statement, including boilerplate rows."""
    page_one = (
        row(760, (50, "First National Bank"))
        + row(740, (50, "Statement Period:"), (140, "01/01/2024 - 01/31/2024"))
        + row(720, (50, "Account Number:"), (140, "****1234"))
        + row(700, (50, "Date"), (130, "Description"), (400, "Amount"), (480, "Balance"))
        + row(680, (50, "01/15/2024"), (130, "Direct Deposit Salary"), (400, "3500.00"), (480, "5200.00"))
        + row(660.6, (400, "-125.50"), (480, "1700.00"))
        + row(660, (50, "01/14/2024"), (130, "Grocery Store Purchase"))
        + row(40, (50, "Page 1 of 2"))
    )
    page_two = (
        row(700, (50, "Jan 20, 2024"), (130, "Coffee Shop"), (400, "-4.75"), (480, "1695.25"))
        + row(680, (50, "Ending balance"), (400, "1,695.25"))
        + row(40, (50, "Page 2 of 2"))
    )
    return [page_one, page_two]


@pytest.fixture
def statement_pdf() -> bytes:
    return build_pdf([
        [
            (50, 740, "Statement Period: January 2024"),
            (50, 700, "01/15/2024"),
            (130, 700, "Direct Deposit Salary"),
            (400, 700, "3500.00"),
            (480, 700, "5200.00"),
            (50, 680, "01/14/2024"),
            (130, 680, "Grocery Store Purchase"),
            (400, 680, "-125.50"),
            (480, 680, "1700.00"),
            (50, 40, "Page 1 of 2"),
        ],
        [
            (50, 700, "2024-01-20"),
            (130, 700, "Coffee Shop"),
            (400, 700, "-4.75"),
            (50, 40, "Page 2 of 2"),
        ],
    ])
