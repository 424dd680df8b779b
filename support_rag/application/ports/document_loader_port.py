from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from support_rag.domain.types import SourceType


@dataclass(frozen=True)
class DocumentPayload:
    text: str
    name: str
    source_path: str
    source_type: SourceType


class DocumentLoaderPort(Protocol):
    def load(self, path: str) -> DocumentPayload: ...
