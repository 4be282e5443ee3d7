"""Embedding backend selection: deterministic hashing or torch-based models."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, List, Sequence

from category_matcher.core.config import Settings, get_settings
from category_matcher.models.category import CategoryRecord
from category_matcher.services.embedding_utils import (
    category_path_embedding,
    hashed_text_embedding,
)

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("hash", "torch")


def _backend_choice(explicit: str | None, configured: str | None, default: str) -> str:
    if explicit:
        return explicit.lower()
    if configured:
        return configured.lower()
    return default


class _HashTextBackend:
    """Model-free backend built on the pseudo-embedding helpers."""

    def __init__(self, dim: int) -> None:
        if dim <= 0:
            raise ValueError("Embedding dimension must be positive")
        self.dimension = dim

    def encode_text(self, text: str) -> List[float]:
        return hashed_text_embedding(text, self.dimension)

    def encode_batch(self, texts: Iterable[str]) -> List[List[float]]:
        return [self.encode_text(text) for text in texts]

    def encode_category(
        self, record: CategoryRecord, catalog: Sequence[CategoryRecord]
    ) -> List[float]:
        return category_path_embedding(record, catalog, self.dimension)


def _load_torch_modules():
    import torch  # type: ignore
    import torch.nn.functional as F  # type: ignore
    from transformers import AutoModel, AutoTokenizer  # type: ignore
    from transformers.utils import logging as hf_logging  # type: ignore

    hf_logging.set_verbosity_error()

    return torch, F, AutoModel, AutoTokenizer


@lru_cache(maxsize=1)
def _load_text_bundle(model_name: str, device: str) -> tuple:
    torch, F, AutoModel, AutoTokenizer = _load_torch_modules()
    model = AutoModel.from_pretrained(model_name).to(device).eval()
    tokenizer = AutoTokenizer.from_pretrained(model_name)
    return model, tokenizer, torch, F


class _TorchTextBackend:
    """Sentence encoder with mean pooling and L2 normalisation."""

    def __init__(self, model_name: str, device: str) -> None:
        self._model, self._tokenizer, self._torch, self._F = _load_text_bundle(
            model_name, device
        )
        self._device = device
        config = getattr(self._model, "config", None)
        self.dimension = int(getattr(config, "hidden_size", 0) or 0)
        self._max_length = min(
            int(getattr(config, "max_position_embeddings", 512) or 512), 512
        )

    def encode_text(self, text: str) -> List[float]:
        return self.encode_batch([text])[0]

    def encode_batch(self, texts: Iterable[str]) -> List[List[float]]:
        cleaned = [text if (text or "").strip() else " " for text in texts]
        if not cleaned:
            return []
        inputs = self._tokenizer(
            cleaned,
            return_tensors="pt",
            padding=True,
            truncation=True,
            max_length=self._max_length,
        )
        inputs = {k: v.to(self._device) for k, v in inputs.items()}
        with self._torch.no_grad():
            outputs = self._model(**inputs)
        mask = inputs["attention_mask"].unsqueeze(-1).to(outputs.last_hidden_state.dtype)
        summed = (outputs.last_hidden_state * mask).sum(dim=1)
        counts = mask.sum(dim=1).clamp(min=1e-9)
        feats = self._F.normalize(summed / counts, dim=-1).cpu().to(self._torch.float32)
        return [row.tolist() for row in feats]

    def encode_category(
        self, record: CategoryRecord, catalog: Sequence[CategoryRecord]
    ) -> List[float]:
        return self.encode_text(record.full_path)


def get_text_backend(kind: str | None = None, settings: Settings | None = None) -> object:
    settings = settings or get_settings()
    choice = _backend_choice(kind, settings.embed_backend, "hash")
    if choice == "hash":
        return _HashTextBackend(settings.embed_dim)
    if choice != "torch":
        raise RuntimeError(
            f"Unsupported EMBED_BACKEND value '{choice}'. "
            f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}."
        )

    device = settings.embed_device
    if not device:
        try:
            import torch  # type: ignore
        except ImportError as exc:  # pragma: no cover - configuration issue
            raise RuntimeError(
                "Torch text backend requires PyTorch. Install the 'model' extra or use EMBED_BACKEND=hash."
            ) from exc
        device = "cuda" if torch.cuda.is_available() else "cpu"

    logger.info("Loading text model '%s' on %s", settings.embed_model_name, device)
    return _TorchTextBackend(settings.embed_model_name, device)
