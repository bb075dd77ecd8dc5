import io
import re
import time
from typing import Dict, Optional

import docx
from pypdf import PdfReader

from packages.isim_core.dto import ResumeExtractionDTO
from packages.isim_core.errors import UnsupportedFormatError
from packages.isim_core.logging import get_logger
from packages.isim_providers.resume.base import IResumeExtractor

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
SUPPORTED_MIME_TYPES = {PDF_MIME, DOCX_MIME, DOC_MIME}

# Name: two or three capitalised words at the start of a line
NAME_PATTERN = re.compile(r"^([A-Z][a-z]+\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)", re.MULTILINE)
EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
PHONE_PATTERN = re.compile(r"(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n]")
_EMAIL_FULL = re.compile(r"^[\w.-]+@[\w.-]+\.\w+$")

class LocalResumeExtractor(IResumeExtractor):
    """
    Best-effort résumé reader.
    PDF text comes from pypdf, DOCX paragraphs and tables from python-docx.
    Malformed content of a supported type degrades to a raw text scrape.
    """

    def __init__(self):
        self.logger = get_logger("isim.providers.resume")

    def extract(self, file_bytes: bytes, mime_type: str) -> ResumeExtractionDTO:
        start_time = time.time()

        if mime_type == PDF_MIME:
            text = self._read_pdf(file_bytes)
        elif mime_type == DOCX_MIME:
            text = self._read_docx(file_bytes)
        elif mime_type == DOC_MIME:
            text = self._scrape(file_bytes)
        else:
            self.logger.warning(f"Resume rejected: unsupported type {mime_type}")
            raise UnsupportedFormatError(mime_type)

        fields = extract_contact_fields(text)
        latency_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            f"Resume extracted. Type: {mime_type}, Chars: {len(text)}, "
            f"Found: {[k for k, v in fields.items() if v]}, Time: {latency_ms}ms"
        )
        return ResumeExtractionDTO(text=text, **fields)

    def _read_pdf(self, file_bytes: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(file_bytes))
            pages = [(page.extract_text() or "").strip() for page in reader.pages]
            text = "\n\n".join(p for p in pages if p)
            if text:
                return text
            self.logger.warning("PDF has no text layer. Falling back to raw scrape.")
        except Exception as e:
            self.logger.warning(f"PDF parsing failed ({e}). Falling back to raw scrape.")
        return self._scrape(file_bytes)

    def _read_docx(self, file_bytes: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(file_bytes))
            lines = [p.text for p in document.paragraphs]
            for table in document.tables:
                for row in table.rows:
                    lines.append("\t".join(cell.text for cell in row.cells))
            return "\n".join(lines).strip()
        except Exception as e:
            self.logger.warning(f"DOCX parsing failed ({e}). Falling back to raw scrape.")
        return self._scrape(file_bytes)

    @staticmethod
    def _scrape(file_bytes: bytes) -> str:
        text = file_bytes.decode("utf-8", errors="replace")
        return _NON_PRINTABLE.sub(" ", text)

def extract_contact_fields(text: str) -> Dict[str, str]:
    name_match = NAME_PATTERN.search(text)
    email_match = EMAIL_PATTERN.search(text)
    phone_match = PHONE_PATTERN.search(text)
    return {
        "name": name_match.group(1).strip() if name_match else "",
        "email": email_match.group(0).strip() if email_match else "",
        "phone": phone_match.group(0).strip() if phone_match else "",
    }

def validate_contact_field(field: str, value: str) -> Optional[str]:
    """Error message for an invalid contact value, None when it is acceptable."""
    value = (value or "").strip()
    if field == "name":
        return None if len(value) >= 2 else "Name is required"
    if field == "email":
        return None if _EMAIL_FULL.match(value) else "Valid email is required"
    if field == "phone":
        # 10-15 digits, any punctuation
        digits = re.sub(r"\D", "", value)
        return None if 10 <= len(digits) <= 15 else "Valid phone number is required"
    raise ValueError(f"Unknown contact field: {field}")

def validate_contact_fields(name: str, email: str, phone: str) -> Dict[str, str]:
    """Return {field: error message} for every invalid field."""
    errors = {}
    for field, value in (("name", name), ("email", email), ("phone", phone)):
        error = validate_contact_field(field, value)
        if error:
            errors[field] = error
    return errors
