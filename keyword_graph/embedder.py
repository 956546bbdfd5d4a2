"""
Label embedder: map each label to a fixed-length vector through an EmbeddingSource and collect
the results into a SampleTable. Label ordering is preserved.

Sources: Azure OpenAI deployments, the OpenAI embeddings API, or a local HuggingFace
sentence-transformers model.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Protocol

import numpy as np
import openai

from .config import KeywordGraphConfig
from .errors import ConfigurationError, ProviderError
from .samples import SampleTable, build_table

LOG = logging.getLogger(__name__)


class EmbeddingSource(Protocol):
    def generate(self, label: str) -> np.ndarray:
        """Return the embedding of label as a 1-D float vector."""
        ...


class OpenAIEmbeddingSource:
    """Embeddings from an OpenAI-compatible client (openai.OpenAI or openai.AzureOpenAI)."""

    def __init__(self, client: Any, model: str, dimensions: int | None = None):
        self._client = client
        self._model = model
        self._dimensions = dimensions

    @property
    def model(self) -> str:
        return self._model

    def generate(self, label: str) -> np.ndarray:
        kwargs: dict[str, Any] = {"model": self._model, "input": label}
        if self._dimensions:
            kwargs["dimensions"] = self._dimensions
        try:
            response = self._client.embeddings.create(**kwargs)
        except openai.OpenAIError as e:
            raise ProviderError(
                f"Embedding request for label {label!r} failed ({self._model}): {e}", label=label
            ) from e
        if not response.data:
            raise ProviderError(
                f"Embedding response for label {label!r} contained no vectors ({self._model})",
                label=label,
            )
        return np.asarray(response.data[0].embedding, dtype=np.float64)


class SentenceTransformerSource:
    """Local HuggingFace sentence-transformers model. Loaded on first use and cached."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", **encode_kwargs: object):
        self._model_name = model_name
        self._encode_kwargs = encode_kwargs
        self._model = None

    @property
    def model(self) -> str:
        return self._model_name

    def _load(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            LOG.info("Loading sentence-transformers model %s", self._model_name)
            self._model = SentenceTransformer(self._model_name)
        return self._model

    def generate(self, label: str) -> np.ndarray:
        try:
            # Each label is embedded as a single "sentence"
            embedding = self._load().encode([label], **self._encode_kwargs)[0]
        except Exception as e:
            raise ProviderError(
                f"Local embedding of label {label!r} failed ({self._model_name}): {e}", label=label
            ) from e
        return np.asarray(embedding, dtype=np.float64)


def build_source(cfg: KeywordGraphConfig) -> EmbeddingSource:
    """Construct the source named by cfg.provider. The config must already be validated."""
    if cfg.provider == "azure":
        client = openai.AzureOpenAI(
            azure_endpoint=cfg.azure_endpoint,
            api_key=cfg.azure_api_key,
            api_version=cfg.azure_api_version,
        )
        return OpenAIEmbeddingSource(client, cfg.azure_embedding_deployment, cfg.dimensions)
    if cfg.provider == "openai":
        client = openai.OpenAI(api_key=cfg.openai_api_key)
        return OpenAIEmbeddingSource(client, cfg.openai_embedding_model, cfg.dimensions)
    if cfg.provider == "sentence-transformers":
        return SentenceTransformerSource(cfg.embedding_model)
    raise ConfigurationError(f"Unknown embedding provider: {cfg.provider!r}")


def _generate_all(labels: Iterable[str], source: EmbeddingSource) -> Iterator[tuple[str, np.ndarray]]:
    for i, label in enumerate(labels):
        LOG.debug("Embedding [%d] %r", i, label)
        yield label, source.generate(label)


def embed_labels(labels: list[str], source: EmbeddingSource) -> SampleTable:
    """
    Embed each label in order, one request at a time, and assemble the SampleTable.

    Raises:
        ProviderError: On the first label the source cannot embed; nothing is returned.
        DimensionMismatchError: As soon as a vector's length differs from the first one's.
    """
    LOG.info("Embedding %d labels", len(labels))
    table = build_table(_generate_all(labels, source))
    if table.n:
        LOG.info("Embedded %d labels (d=%d)", table.n, table.d)
    return table
