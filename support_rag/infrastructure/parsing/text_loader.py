from __future__ import annotations

import os
from dataclasses import dataclass

from support_rag.application.ports.document_loader_port import DocumentLoaderPort, DocumentPayload
from support_rag.domain.errors import DocumentNotFoundError, DocumentReadError, UnsupportedFormatError

_TYPES = {".txt": "txt", ".md": "md"}


@dataclass
class PlainTextLoaderAdapter(DocumentLoaderPort):
    encoding: str = "utf-8"

    def load(self, path: str) -> DocumentPayload:  # type: ignore[override]
        ext = os.path.splitext(path)[1].lower()
        if ext not in _TYPES:
            raise UnsupportedFormatError(f"Invalid file extension: {path}")
        try:
            with open(path, encoding=self.encoding) as f:
                text = f.read()
        except FileNotFoundError as ex:
            raise DocumentNotFoundError(f"File not found: {path}") from ex
        except (OSError, UnicodeDecodeError) as ex:
            raise DocumentReadError(f"Failed to read file: {ex}") from ex
        return DocumentPayload(
            text=text,
            name=os.path.basename(path),
            source_path=path,
            source_type=_TYPES[ext],  # type: ignore[arg-type]
        )
