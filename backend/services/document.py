"""Knowledge base extraction for PDF, Word, and text files.

Handles:
- File validation (extension, size)
- Text extraction from PDF (PyMuPDF), DOCX (python-docx), and text files
- Filename sanitization for security
- Concurrent extraction of several uploads with per-file failures

All blocking parsing is wrapped with asyncio.to_thread for proper async handling.
"""

import asyncio
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

import fitz  # PyMuPDF
from docx import Document as DocxDocument

from config import get_settings
from services.types import KnowledgeItem
from utils import format_file_size

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".csv", ".json"})
SUPPORTED_EXTENSIONS = frozenset({".pdf", ".docx"}) | TEXT_EXTENSIONS


class DocumentParseError(Exception):
    """Raised when document parsing fails."""

    pass


class UnsupportedFileTypeError(Exception):
    """Raised when file type is not supported."""

    pass


class FileTooLargeError(Exception):
    """Raised when file exceeds size limit."""

    pass


class EmptyDocumentError(Exception):
    """Raised when document contains no extractable text."""

    pass


@dataclass
class ExtractionFailure:
    """A file that could not be turned into a knowledge item."""

    name: str
    reason: str
    error_type: type[Exception] = ValueError


@dataclass
class ExtractionResult:
    """Outcome of extracting a batch of uploads."""

    items: list[KnowledgeItem] = field(default_factory=list)
    failures: list[ExtractionFailure] = field(default_factory=list)


class DocumentParser:
    """Service for turning uploaded files into knowledge items.

    Parsing runs in worker threads via asyncio.to_thread to avoid
    blocking the event loop.
    """

    def __init__(self) -> None:
        """Initialize document parser."""
        self.settings = get_settings()

    def sanitize_filename(self, filename: str) -> str:
        """Sanitize filename to prevent path traversal and other issues."""
        if not filename:
            return "document"

        filename = Path(filename).name
        filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", filename)

        max_length = 255
        if len(filename) > max_length:
            name, ext = Path(filename).stem, Path(filename).suffix
            filename = name[: max_length - len(ext)] + ext

        if not filename or filename.startswith("."):
            filename = "document" + Path(filename).suffix

        return filename

    def validate_file(self, filename: str, file_size: int) -> str:
        """Validate uploaded file and return extension."""
        if not filename:
            raise ValueError("Filename cannot be empty")

        if file_size > self.settings.max_file_size_bytes:
            raise FileTooLargeError(
                f"File size {format_file_size(file_size)} exceeds limit of "
                f"{self.settings.max_file_size_mb}MB"
            )

        ext = Path(filename).suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileTypeError(
                f"File type '{ext}' not supported. Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
            )

        return ext

    async def extract_knowledge_item(self, filename: str, data: bytes) -> KnowledgeItem:
        """Validate, parse and normalize one uploaded file.

        Raises:
            FileTooLargeError, UnsupportedFileTypeError, ValueError: Invalid upload.
            EmptyDocumentError: Nothing left after trimming whitespace.
            DocumentParseError: The parser failed.
        """
        ext = self.validate_file(filename, len(data))

        try:
            if ext == ".pdf":
                text = await asyncio.to_thread(self._parse_pdf_sync, data)
            elif ext == ".docx":
                text = await asyncio.to_thread(self._parse_docx_sync, data)
            else:
                text = await asyncio.to_thread(self._parse_text_sync, data)
        except DocumentParseError:
            raise
        except Exception as e:
            logger.error("Failed to parse document %s: %s", filename, e)
            raise DocumentParseError(f"Failed to parse document: {e}") from e

        text = self._normalize_text(text)
        if not text:
            raise EmptyDocumentError("Document contains no extractable text")

        return KnowledgeItem(name=self.sanitize_filename(filename), content=text)

    async def extract_many(self, files: list[tuple[str, bytes]]) -> ExtractionResult:
        """Extract several files concurrently.

        Failures are collected per file; the batch itself never fails.
        """
        outcomes = await asyncio.gather(
            *(self._extract_or_fail(name, data) for name, data in files)
        )

        result = ExtractionResult()
        for outcome in outcomes:
            if isinstance(outcome, ExtractionFailure):
                result.failures.append(outcome)
            else:
                result.items.append(outcome)

        logger.info(
            "Extracted %d of %d file(s)", len(result.items), len(files)
        )
        return result

    async def _extract_or_fail(
        self, filename: str, data: bytes
    ) -> KnowledgeItem | ExtractionFailure:
        name = self.sanitize_filename(filename)
        try:
            return await self.extract_knowledge_item(filename, data)
        except (
            DocumentParseError,
            EmptyDocumentError,
            FileTooLargeError,
            UnsupportedFileTypeError,
            ValueError,
        ) as e:
            logger.warning("Skipping %s: %s", name, e)
            return ExtractionFailure(name=name, reason=str(e), error_type=type(e))

    def _normalize_text(self, text: str) -> str:
        """Normalize text by cleaning up whitespace."""
        text = re.sub(r"\n{3,}", "\n\n", text)
        text = re.sub(r"[ \t]{2,}", " ", text)
        lines = [line.strip() for line in text.split("\n")]
        return "\n".join(lines).strip()

    def _parse_pdf_sync(self, data: bytes) -> str:
        """Parse PDF bytes using PyMuPDF (synchronous)."""
        doc = None
        try:
            doc = fitz.open(stream=data, filetype="pdf")
            text_parts = []

            for page_num, page in enumerate(doc, start=1):
                try:
                    page_text = page.get_text()
                    if page_text:
                        text_parts.append(page_text)
                except Exception as e:
                    logger.warning(
                        "Failed to extract text from page %d: %s", page_num, e
                    )

            return "\n\n".join(text_parts)

        except Exception as e:
            raise DocumentParseError(f"Failed to parse PDF: {e}") from e
        finally:
            if doc is not None:
                doc.close()

    def _parse_docx_sync(self, data: bytes) -> str:
        """Parse Word document bytes using python-docx (synchronous)."""
        try:
            doc = DocxDocument(io.BytesIO(data))
            text_parts = []

            # Extract paragraphs
            for p in doc.paragraphs:
                if p.text.strip():
                    text_parts.append(p.text)

            # Extract tables
            for table in doc.tables:
                for row in table.rows:
                    row_text = " | ".join(cell.text.strip() for cell in row.cells)
                    if row_text.strip():
                        text_parts.append(row_text)

            return "\n\n".join(text_parts)

        except Exception as e:
            raise DocumentParseError(f"Failed to parse DOCX: {e}") from e

    def _parse_text_sync(self, data: bytes) -> str:
        """Decode a plain text file (synchronous)."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            text = data.decode("latin-1")

        return text
