from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from support_rag.application.ports.embedding_port import EmbeddingPort
from support_rag.domain.errors import EmbeddingError


@dataclass
class SentenceTransformersEmbeddingAdapter(EmbeddingPort):
    # mean pooling + L2 norm, 384 dims
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # "cuda" falls verfügbar

    def __post_init__(self) -> None:
        self._model: Any | None = None

    def _get(self) -> Any:
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except Exception as ex:  # pragma: no cover
                raise EmbeddingError("sentence-transformers not installed") from ex
            try:
                self._model = SentenceTransformer(self.model_name, device=self.device)
            except Exception as ex:  # noqa: BLE001
                raise EmbeddingError(f"load failed for {self.model_name}: {ex}") from ex
        return self._model

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        model = self._get()
        return [
            v.tolist()
            for v in model.encode(
                list(texts),
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        ]

    def embed_query(self, text: str) -> list[float]:
        model = self._get()
        return model.encode(text, normalize_embeddings=True, show_progress_bar=False).tolist()
