"""Tests for the knowledge base extraction service."""

import io

import pytest
from docx import Document as DocxDocument

from services.document import (
    DocumentParser,
    DocumentParseError,
    EmptyDocumentError,
    FileTooLargeError,
    UnsupportedFileTypeError,
)


class TestDocumentParser:
    """Tests for DocumentParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = DocumentParser()

    def test_sanitize_filename_basic(self):
        """Test basic filename sanitization."""
        result = self.parser.sanitize_filename("document.pdf")
        assert result == "document.pdf"

    def test_sanitize_filename_path_traversal(self):
        """Test path traversal prevention."""
        result = self.parser.sanitize_filename("../../../etc/passwd")
        assert "/" not in result
        assert ".." not in result

    def test_sanitize_filename_special_chars(self):
        """Test special character removal."""
        result = self.parser.sanitize_filename('doc<>:"|?*.pdf')
        assert "<" not in result
        assert ">" not in result
        assert ":" not in result

    def test_sanitize_filename_long_name(self):
        """Test long filename truncation."""
        result = self.parser.sanitize_filename("a" * 300 + ".pdf")
        assert len(result) <= 255
        assert result.endswith(".pdf")

    def test_sanitize_filename_empty(self):
        assert self.parser.sanitize_filename("") == "document"

    def test_sanitize_filename_dot_start(self):
        result = self.parser.sanitize_filename(".hidden")
        assert not result.startswith(".")

    def test_validate_file_supported_types(self):
        """Test validation of supported file types."""
        for name, expected in [
            ("doc.pdf", ".pdf"),
            ("doc.docx", ".docx"),
            ("notes.txt", ".txt"),
            ("README.md", ".md"),
            ("table.csv", ".csv"),
            ("data.json", ".json"),
        ]:
            assert self.parser.validate_file(name, 1000) == expected

    def test_validate_file_unsupported_type(self):
        """Test rejection of unsupported file types."""
        with pytest.raises(UnsupportedFileTypeError):
            self.parser.validate_file("doc.exe", 1000)

        with pytest.raises(UnsupportedFileTypeError):
            self.parser.validate_file("photo.jpg", 1000)

    def test_validate_file_too_large(self):
        """Test rejection of files exceeding size limit."""
        with pytest.raises(FileTooLargeError):
            self.parser.validate_file("doc.pdf", 100 * 1024 * 1024)

    def test_validate_file_case_insensitive(self):
        assert self.parser.validate_file("DOC.PDF", 1000) == ".pdf"
        assert self.parser.validate_file("Doc.DOCX", 1000) == ".docx"

    def test_normalize_text(self):
        """Test text normalization."""
        result = self.parser._normalize_text("Line one\n\n\n\nLine two   with   spaces")

        # Multiple newlines reduced to double
        assert "\n\n\n" not in result
        # Multiple spaces reduced to single
        assert "   " not in result

    @pytest.mark.asyncio
    async def test_extract_text_file(self, sample_text_content):
        """Test extracting a plain text file."""
        item = await self.parser.extract_knowledge_item(
            "handbook.txt", sample_text_content.encode("utf-8")
        )

        assert item.name == "handbook.txt"
        assert item.content.startswith("Company Handbook")
        assert "25 days of paid leave" in item.content
        assert "\n\n\n" not in item.content

    @pytest.mark.asyncio
    async def test_extract_latin1_text_file(self):
        """Non-UTF-8 text still decodes."""
        item = await self.parser.extract_knowledge_item("menu.txt", "Café".encode("latin-1"))
        assert item.content == "Café"

    @pytest.mark.asyncio
    async def test_extract_docx_file(self):
        """Test extracting paragraphs and tables from a Word document."""
        doc = DocxDocument()
        doc.add_paragraph("Quarterly report")
        table = doc.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Revenue"
        table.rows[0].cells[1].text = "100"
        buffer = io.BytesIO()
        doc.save(buffer)

        item = await self.parser.extract_knowledge_item("report.docx", buffer.getvalue())

        assert "Quarterly report" in item.content
        assert "Revenue | 100" in item.content

    @pytest.mark.asyncio
    async def test_extract_empty_file(self):
        """Test empty file raises error."""
        with pytest.raises(EmptyDocumentError):
            await self.parser.extract_knowledge_item("empty.txt", b"")

    @pytest.mark.asyncio
    async def test_extract_whitespace_file(self):
        """Test whitespace-only file raises error."""
        with pytest.raises(EmptyDocumentError):
            await self.parser.extract_knowledge_item("blank.md", b"   \n\n   ")

    @pytest.mark.asyncio
    async def test_extract_corrupted_pdf(self):
        with pytest.raises(DocumentParseError):
            await self.parser.extract_knowledge_item("broken.pdf", b"not a pdf")

    @pytest.mark.asyncio
    async def test_extract_many_skips_failures(self):
        """An empty file next to a readable one yields exactly one item."""
        result = await self.parser.extract_many(
            [("empty.txt", b""), ("hello.txt", b"hello"), ("virus.exe", b"MZ")]
        )

        assert [item.name for item in result.items] == ["hello.txt"]
        assert result.items[0].content == "hello"
        assert {f.name for f in result.failures} == {"empty.txt", "virus.exe"}
        failure_types = {f.name: f.error_type for f in result.failures}
        assert failure_types == {
            "empty.txt": EmptyDocumentError,
            "virus.exe": UnsupportedFileTypeError,
        }

    @pytest.mark.asyncio
    async def test_extract_many_preserves_order(self):
        result = await self.parser.extract_many(
            [("b.txt", b"second"), ("a.txt", b"first")]
        )
        assert [item.name for item in result.items] == ["b.txt", "a.txt"]
