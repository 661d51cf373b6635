"""Document text extraction.

Responsibilities:
- Read plain-text syllabi directly
- Extract the text layer of PDFs page by page
- Fall back to OCR for pages without a text layer (optional)
- Report unreadable, protected or unsupported documents with typed errors,
  so callers can offer manual text entry instead

Dependencies:
- pymupdf (fitz); OCR additionally needs Tesseract installed
"""

from __future__ import annotations

from pathlib import Path

import fitz
import structlog

from courseflow.config.app_config import ExtractionConfig

logger = structlog.get_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".text", ".md"}
PDF_EXTENSIONS = {".pdf"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | PDF_EXTENSIONS

MIN_CHARS_PER_PAGE = 20  # Below this a page is treated as having no text layer
OCR_DPI = 300


class DocumentExtractionError(Exception):
    """Base exception for document extraction errors."""

    pass


class DocumentUnreadableError(DocumentExtractionError):
    """Raised when no usable text could be extracted."""

    def __init__(self, file_path: Path, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(
            f"{file_path.name} could not be read automatically ({reason}). "
            "Please use the text input option to enter the syllabus manually."
        )


class ProtectedPdfError(DocumentExtractionError):
    """Raised when PDF is password-protected."""

    def __init__(self, file_path: Path):
        self.file_path = file_path
        super().__init__(f"PDF is password-protected: {file_path.name}")


class UnsupportedDocumentError(DocumentExtractionError):
    """Raised for file types that are neither PDF nor plain text."""

    def __init__(self, file_path: Path):
        self.file_path = file_path
        super().__init__(
            f"Unsupported file type '{file_path.suffix or '(none)'}': {file_path.name}. "
            "Upload a PDF or a text file."
        )


def extract_text(file_path: Path, config: ExtractionConfig | None = None) -> str:
    """Convert a syllabus document to plaintext.

    Args:
        file_path: Path to a .pdf or plain-text file
        config: Extraction settings (minimum text, OCR fallback)

    Returns:
        Extracted text.

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnsupportedDocumentError: If the extension is not supported
        ProtectedPdfError: If the PDF is password-protected
        DocumentUnreadableError: If too little text could be extracted
    """
    file_path = Path(file_path)
    config = config or ExtractionConfig()

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix in TEXT_EXTENSIONS:
        return _read_text_file(file_path)
    if suffix in PDF_EXTENSIONS:
        return extract_pdf_text(file_path, config)

    raise UnsupportedDocumentError(file_path)


def _read_text_file(file_path: Path) -> str:
    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentUnreadableError(file_path, "not UTF-8 text") from e

    logger.info("document_extractor.text_read", file=file_path.name, chars=len(text))
    return text


def extract_pdf_text(file_path: Path, config: ExtractionConfig) -> str:
    """Extract text from every page of a PDF.

    Pages with fewer than MIN_CHARS_PER_PAGE characters are OCR'd when
    ``config.ocr_fallback`` is set.
    """
    try:
        doc = fitz.open(file_path)
    except (fitz.FileDataError, RuntimeError) as e:
        raise DocumentUnreadableError(file_path, "damaged or not a PDF") from e

    try:
        if doc.needs_pass:
            raise ProtectedPdfError(file_path)

        parts = []
        ocr_pages = 0
        for page in doc:
            page_text = page.get_text()
            if len(page_text.strip()) < MIN_CHARS_PER_PAGE and config.ocr_fallback:
                ocr_text = _ocr_page(page)
                if ocr_text:
                    page_text = ocr_text
                    ocr_pages += 1
            parts.append(page_text)
        total_pages = len(doc)
    finally:
        doc.close()

    text = "\n\n".join(parts)
    char_count = len(text.strip())

    logger.info(
        "document_extractor.pdf_extracted",
        file=file_path.name,
        pages=total_pages,
        ocr_pages=ocr_pages,
        chars=char_count,
    )

    if char_count < config.min_text_chars:
        logger.warning(
            "document_extractor.scanned_pdf",
            file=file_path.name,
            chars=char_count,
            min_chars=config.min_text_chars,
        )
        raise DocumentUnreadableError(file_path, "very little text found")

    return text


def _ocr_page(page: fitz.Page) -> str:
    """OCR one page; returns "" when OCR is not available."""
    try:
        textpage = page.get_textpage_ocr(dpi=OCR_DPI, full=True)
    except RuntimeError as e:
        logger.debug("document_extractor.ocr_unavailable", page=page.number, error=str(e))
        return ""
    return page.get_text(textpage=textpage).strip()
