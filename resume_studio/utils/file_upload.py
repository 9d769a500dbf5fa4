"""
File Upload Utility - Extract text from job description files.

Supported formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Plain Text (.txt)

Max file size: 5MB
"""

import io
from typing import Tuple

from docx import Document
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from resume_studio.core.errors import ApiError, ValidationError

MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
ALLOWED_EXTENSIONS = {'.pdf', '.docx', '.txt'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


async def extract_text_from_file(file: UploadFile) -> Tuple[str, str]:
    """
    Extract text from uploaded file.

    Args:
        file: FastAPI UploadFile

    Returns:
        Tuple of (extracted_text, filename)

    Raises:
        ValidationError / ApiError on validation or extraction errors
    """
    if not file.filename:
        raise ValidationError("No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type '{ext}'. Allowed: PDF, DOCX, TXT")

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise ApiError("FILE_TOO_LARGE", f"File too large. Maximum size: {MAX_FILE_SIZE_MB}MB", 413)

    text = await run_in_threadpool(EXTRACTORS[ext], content)

    if not text.strip():
        raise ValidationError("Could not extract text from file. File may be empty or corrupted.")

    return text, file.filename


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = [page.extract_text() for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise ValidationError(f"Error reading PDF: {e}")
    return '\n'.join(p for p in pages if p)


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes (paragraphs, then table rows)."""
    try:
        doc = Document(io.BytesIO(content))
    except Exception as e:
        # python-docx raises zipfile / lxml / KeyError variants for bad files
        raise ValidationError(f"Error reading DOCX: {e}")

    text_parts = [para.text for para in doc.paragraphs if para.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))
    return '\n'.join(text_parts)


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'cp1252']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte
    return content.decode('latin-1')


EXTRACTORS = {
    '.pdf': extract_from_pdf,
    '.docx': extract_from_docx,
    '.txt': extract_from_txt,
}
