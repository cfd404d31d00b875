"""Plain-text decoders for uploaded contract files.

Decoders are looked up by file extension. An unknown extension raises
:class:`UnsupportedFormatError` before any bytes are read; a decoder that
cannot read its file raises :class:`ExtractionFailureError`.
"""

import os
from io import BytesIO
from typing import Dict, Iterable, Optional, Protocol

import pdfplumber
from docx import Document

from contract_import.core.exceptions import ExtractionFailureError, UnsupportedFormatError
from contract_import.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentDecoder(Protocol):
    """Turns the bytes of one document format into plain text."""

    def decode(self, content: bytes) -> str:
        ...


class DocxDecoder:
    """Word documents: paragraphs first, then table rows with ``|`` between cells."""

    def decode(self, content: bytes) -> str:
        try:
            document = Document(BytesIO(content))
        except Exception as e:
            raise ExtractionFailureError(f"Cannot open Word document: {str(e)}", original_error=e)

        lines = [p.text for p in document.paragraphs if p.text.strip()]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    lines.append(" | ".join(cells))
        return "\n".join(lines)


class PdfDecoder:
    """PDF documents: page text joined by newlines."""

    def decode(self, content: bytes) -> str:
        try:
            with pdfplumber.open(BytesIO(content)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            raise ExtractionFailureError(f"Cannot open PDF document: {str(e)}", original_error=e)

        LOGGER.debug(f"Decoded {len(pages)} PDF pages", extra={"total_pages": len(pages)})
        return "\n".join(pages)


class DecoderRegistry:
    """Maps lowercase file extensions to decoders.

    Args:
        decoders: Extension (with dot) to decoder; ``.docx`` and ``.pdf`` by default.
        supported_extensions: Optional allow-list narrowing the registered decoders.
    """

    def __init__(
        self,
        decoders: Optional[Dict[str, DocumentDecoder]] = None,
        supported_extensions: Optional[Iterable[str]] = None,
    ):
        registered = decoders if decoders is not None else {".docx": DocxDecoder(), ".pdf": PdfDecoder()}
        allowed = {e.lower() for e in supported_extensions} if supported_extensions else None
        self._decoders = {
            ext.lower(): decoder
            for ext, decoder in registered.items()
            if allowed is None or ext.lower() in allowed
        }

    @property
    def extensions(self):
        return sorted(self._decoders)

    def decoder_for(self, file_name: str) -> DocumentDecoder:
        """Pick the decoder for a file name.

        Raises:
            UnsupportedFormatError: If the extension has no decoder
        """
        extension = os.path.splitext(file_name or "")[1].lower()
        decoder = self._decoders.get(extension)
        if decoder is None:
            raise UnsupportedFormatError(
                f"Unsupported file format '{extension or file_name}'. Supported: {', '.join(self.extensions)}"
            )
        return decoder

    def decode(self, file_name: str, content: bytes) -> str:
        """Decode a file to plain text.

        Args:
            file_name: Original file name; its extension selects the decoder
            content: File bytes

        Returns:
            Extracted text, possibly empty

        Raises:
            UnsupportedFormatError: If the extension has no decoder
            ExtractionFailureError: If the decoder cannot read the file
        """
        decoder = self.decoder_for(file_name)
        text = decoder.decode(content)
        LOGGER.info(
            f"Decoded {file_name}",
            extra={"file_name": file_name, "text_length": len(text)},
        )
        return text
