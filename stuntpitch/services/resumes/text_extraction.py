"""Resume text extraction: PDF (PyMuPDF), DOCX (python-docx) and plain text, from bytes,
local storage or a remote URL."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
import requests
from docx import Document
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table

from stuntpitch.core.config import settings

logger = logging.getLogger("resumes.text")

PDF_TYPES = {"application/pdf"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
TEXT_TYPES = {"text/plain"}
RESUME_EXTENSIONS = {".pdf", ".docx", ".txt"}


def parse_pdf_content(file_content: bytes) -> str:
    """
    Parses PDF content using PyMuPDF (fitz).
    Uses 'blocks' mode first; falls back to sorted 'text' mode when that comes out
    fragmented (one char per line).
    """
    try:
        doc = fitz.open(stream=file_content, filetype="pdf")
        full_text = []
        for page in doc:
            blocks = page.get_text("blocks")
            # (x0, y0, x1, y1, text, block_no, block_type); type 0 is text
            text_blocks = [b for b in blocks if b[6] == 0 and b[4].strip()]
            for b in sorted(text_blocks, key=lambda b: (round(b[1] / 10) * 10, b[0])):
                full_text.append(b[4].strip())

        text_result = "\n\n".join(full_text)
        if _is_extraction_broken(text_result):
            logger.info("PyMuPDF 'blocks' mode produced fragmented text. Retrying with 'text' mode...")
            text_result = "\n".join(page.get_text("text", sort=True) for page in doc)
        return text_result
    except Exception as e:
        logger.error(f"Error parsing PDF with PyMuPDF: {e}")
        raise


def _is_extraction_broken(text: str) -> bool:
    """Heuristic: more than 40% of lines being 1-2 chars means garbage extraction."""
    if not text:
        return True
    lines = text.strip().split("\n")
    short_lines = sum(1 for line in lines if len(line.strip()) <= 2)
    return len(lines) > 10 and (short_lines / len(lines)) > 0.4


def _extract_text_from_xml(element) -> str:
    """Collect <w:t> text recursively, which also catches text boxes python-docx skips."""
    parts = []
    for node in element.iter():
        if node.tag.endswith("}t"):
            if node.text:
                parts.append(node.text)
        elif node.tag.endswith("}br") or node.tag.endswith("}cr") or node.tag.endswith("}p"):
            parts.append("\n")
        elif node.tag.endswith("}tab"):
            parts.append("\t")
    return "".join(parts).strip()


def parse_docx_content(file_content: bytes) -> str:
    """Body paragraphs and tables in document order."""
    doc = Document(io.BytesIO(file_content))
    full_text = []
    for element in doc.element.body:
        if isinstance(element, CT_P):
            para_text = _extract_text_from_xml(element)
            if para_text:
                full_text.append(para_text)
        elif isinstance(element, CT_Tbl):
            table = Table(element, doc)
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    full_text.append(" | ".join(row_text))
    return "\n".join(full_text)


def parse_text_content(file_content: bytes) -> str:
    """Helper for plain text files"""
    return file_content.decode("utf-8", errors="ignore")


def extract_text(file_content: bytes, *, filename: str = "", content_type: Optional[str] = None) -> str:
    """Dispatch on content type, then extension. Raises ValueError for unsupported formats."""
    suffix = Path(filename).suffix.lower()
    ctype = (content_type or "").split(";")[0].strip().lower()
    if ctype in PDF_TYPES or suffix == ".pdf":
        return parse_pdf_content(file_content)
    if ctype in DOCX_TYPES or suffix == ".docx":
        return parse_docx_content(file_content)
    if ctype in TEXT_TYPES or suffix == ".txt":
        return parse_text_content(file_content)
    raise ValueError(f"Unsupported resume format: {filename or ctype or 'unknown'}")


def fetch_resume_bytes(resume_url: str, *, timeout: Optional[float] = None) -> bytes:
    """Download a remote resume, or read it from STORAGE_DIR for relative paths."""
    if resume_url.startswith(("http://", "https://")):
        resp = requests.get(resume_url, timeout=timeout or settings.RESUME_FETCH_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return resp.content
    path = Path(settings.STORAGE_DIR) / resume_url.lstrip("/")
    return path.read_bytes()


def fetch_resume_text(resume_url: str, *, timeout: Optional[float] = None) -> str:
    content = fetch_resume_bytes(resume_url, timeout=timeout)
    text = extract_text(content, filename=resume_url.split("?")[0])
    logger.info("Extracted %d chars from %s", len(text), resume_url)
    return text
