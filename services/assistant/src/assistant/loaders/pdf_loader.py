"""Extract text from uploaded .pdf files."""
import io

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from assistant.errors import EmptyDocumentError
from assistant.loaders.base import BaseLoader


class PDFLoader(BaseLoader):
    @property
    def extensions(self) -> tuple[str, ...]:
        return (".pdf",)

    def load_bytes(self, data: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(data))
            parts = []
            for page in reader.pages:
                text = page.extract_text()
                if text:
                    parts.append(text)
        except PdfReadError as e:
            raise EmptyDocumentError(f"Could not read PDF: {e}") from e
        return "\n\n".join(parts)
