import re
import logging
from typing import Dict, Iterable, List, Sequence

from schema import Line, TextFragment

logger = logging.getLogger(__name__)

# Fragments whose vertical positions fall in the same bucket of this size
# belong to the same visual line.
LINE_TOLERANCE = 2.0

NOISE_CUES = (
    'page ',
    'statement period',
    'account number',
    'beginning balance',
    'ending balance',
    'total deposits',
    'total withdrawals',
    'summary',
)

_WHITESPACE_RUN = re.compile(r'\s{2,}')


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    return _WHITESPACE_RUN.sub(' ', text).strip()


class DataPreprocessor:
    """Turns positioned page fragments into clean candidate lines."""

    def __init__(self, line_tolerance: float = LINE_TOLERANCE, noise_cues: Sequence[str] = NOISE_CUES):
        if line_tolerance <= 0:
            raise ValueError("line_tolerance must be positive")
        self.logger = logging.getLogger(self.__class__.__name__)
        self.line_tolerance = line_tolerance
        self.noise_cues = tuple(cue.lower() for cue in noise_cues)

    def reconstruct_lines(self, fragments: Iterable[TextFragment]) -> List[Line]:
        """
        Cluster one page's fragments into visual lines.

        Args:
            fragments: Fragments of a single page, in extraction order

        Returns:
            Lines ordered top of page first, each read left to right
        """
        buckets: Dict[int, List[TextFragment]] = {}
        for fragment in fragments:
            key = round(fragment.y / self.line_tolerance)
            buckets.setdefault(key, []).append(fragment)

        # Page coordinates grow upward, so the top line has the largest y.
        groups = sorted(buckets.values(), key=lambda group: max(f.y for f in group), reverse=True)

        lines = []
        for group in groups:
            ordered = sorted(group, key=lambda f: f.x)
            text = collapse_whitespace(' '.join(f.text for f in ordered))
            if not text:
                continue
            lines.append(Line(text=text, fragments=ordered))

        return lines

    def preprocess_pages(self, pages: Sequence[Sequence[TextFragment]]) -> List[Line]:
        """Reconstruct the lines of every page, concatenated in page order."""
        all_lines = []
        for page_num, fragments in enumerate(pages, start=1):
            page_lines = self.reconstruct_lines(fragments)
            self.logger.debug(f"Page {page_num}: {len(fragments)} fragments -> {len(page_lines)} lines")
            all_lines.extend(page_lines)

        self.logger.info(f"Reconstructed {len(all_lines)} lines from {len(pages)} pages")
        return all_lines

    def is_noise_line(self, text: str) -> bool:
        """Whether a line is statement boilerplate (headers, totals, banners)."""
        text_lower = text.lower()
        return any(cue in text_lower for cue in self.noise_cues)

    def filter_noise(self, lines: Iterable[Line]) -> List[Line]:
        """Drop boilerplate lines, keeping the order of the rest."""
        kept = []
        for line in lines:
            if self.is_noise_line(line.text):
                self.logger.debug(f"Skipping boilerplate line: {line.text}")
                continue
            kept.append(line)
        return kept
