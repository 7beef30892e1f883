"""Tabular source reader for CSV and PDF bank statements.

CSV statements decode into a header list plus one raw row (an ordered
column -> value mapping) per line. PDF statements carry no headers, only
positioned text, so their words are regrouped into visual lines: tokens
are clustered on their vertical position and each line is ordered
left-to-right, keeping the x position of every token for the positional
assembly step.

Both sources are lazy and restartable: iterating again re-reads the
in-memory document from the start.
"""

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import pdfplumber
from pdfminer.pdfparser import PDFSyntaxError
from pdfplumber.utils.exceptions import PdfminerException

from feerecon.domain.entities import SourceKind
from feerecon.domain.errors import MalformedInputError, ValidationError

logger = logging.getLogger(__name__)

# Maximum vertical distance between tokens printed on the same line.
Y_TOLERANCE = 5.0

RawRow = dict[str, str]


@dataclass(frozen=True)
class Glyph:
    """A positioned piece of text extracted from a PDF page."""

    page: int
    x: float
    y: float
    text: str


@dataclass(frozen=True)
class PDFLine:
    """Reconstructed statement line with its position-tagged tokens."""

    page: int
    y: float
    tokens: tuple[Glyph, ...]

    @property
    def text(self) -> str:
        return " ".join(t.text.strip() for t in self.tokens if t.text.strip())


def group_lines(glyphs: Iterable[Glyph], y_tolerance: float = Y_TOLERANCE) -> tuple[PDFLine, ...]:
    """Fold glyphs into lines by vertical proximity.

    Glyphs are visited top-to-bottom per page; a glyph joins the current
    line when its y lies within ``y_tolerance`` of the previous glyph on
    that line. Each finished line is sorted by x.
    """
    ordered = sorted(glyphs, key=lambda g: (g.page, g.y, g.x))
    lines: list[PDFLine] = []
    current: list[Glyph] = []

    def close(tokens: list[Glyph]) -> None:
        if tokens:
            tokens_by_x = tuple(sorted(tokens, key=lambda g: g.x))
            lines.append(PDFLine(page=tokens[0].page, y=tokens[0].y, tokens=tokens_by_x))

    for glyph in ordered:
        if current and (
            glyph.page != current[-1].page or abs(glyph.y - current[-1].y) > y_tolerance
        ):
            close(current)
            current = []
        current.append(glyph)
    close(current)

    return tuple(lines)


class CSVSource:
    """Decoded CSV statement: headers plus lazily parsed rows."""

    kind = SourceKind.CSV

    def __init__(self, data: bytes):
        try:
            self._text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"CSV file is not valid UTF-8 text: {e}") from e

        self._delimiter = self._sniff_delimiter(self._text[:1024])
        reader = self._reader()
        try:
            self.headers: list[str] = [h.strip() for h in (reader.fieldnames or [])]
        except csv.Error as e:
            raise MalformedInputError(f"Could not read CSV header: {e}") from e
        if not self.headers:
            raise MalformedInputError("CSV file has no columns")
        logger.debug("CSV headers detected: %s", self.headers)

    @staticmethod
    def _sniff_delimiter(sample: str) -> str:
        try:
            return csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
        except csv.Error:
            return ","

    def _reader(self) -> csv.DictReader:
        return csv.DictReader(io.StringIO(self._text, newline=""), delimiter=self._delimiter)

    def __iter__(self) -> Iterator[tuple[int, RawRow]]:
        """Yield ``(line_number, row)`` pairs; the header is line 1."""
        reader = self._reader()
        try:
            for row_num, row in enumerate(reader, start=2):
                yield row_num, {
                    (key or "").strip(): (value or "").strip() if isinstance(value, str) else ""
                    for key, value in row.items()
                    if key is not None
                }
        except csv.Error as e:
            raise MalformedInputError(f"Malformed CSV near line {reader.line_num}: {e}") from e


class PDFSource:
    """PDF statement reconstructed into positioned text lines."""

    kind = SourceKind.PDF

    def __init__(self, data: bytes, y_tolerance: float = Y_TOLERANCE):
        self._data = data
        self.y_tolerance = y_tolerance
        with self._open() as pdf:
            self.page_count = len(pdf.pages)

    def _open(self):
        try:
            return pdfplumber.open(io.BytesIO(self._data))
        except (PdfminerException, PDFSyntaxError) as e:
            raise MalformedInputError(f"Could not read PDF: {e}") from e

    def __iter__(self) -> Iterator[PDFLine]:
        with self._open() as pdf:
            for page_number, page in enumerate(pdf.pages, start=1):
                try:
                    words = page.extract_words() or []
                except (PdfminerException, PDFSyntaxError) as e:
                    raise MalformedInputError(f"Could not read PDF page {page_number}: {e}") from e
                glyphs = [
                    Glyph(page=page_number, x=float(w["x0"]), y=float(w["top"]), text=w["text"])
                    for w in words
                ]
                yield from group_lines(glyphs, self.y_tolerance)


def open_source(data: bytes, kind: SourceKind | str) -> CSVSource | PDFSource:
    """Open a statement of the declared kind.

    Raises:
        ValidationError: If the kind is not csv or pdf
        MalformedInputError: If the bytes cannot be decoded as that kind
    """
    try:
        kind = SourceKind(kind)
    except ValueError:
        raise ValidationError(f"Unsupported statement kind '{kind}'. Must be csv or pdf")
    if kind is SourceKind.CSV:
        return CSVSource(data)
    return PDFSource(data)


def infer_kind(filename: str) -> Optional[SourceKind]:
    """Guess the statement kind from a file name extension."""
    lowered = filename.lower()
    if lowered.endswith(".pdf"):
        return SourceKind.PDF
    if lowered.endswith(".csv") or lowered.endswith(".txt"):
        return SourceKind.CSV
    return None
