import unittest
from types import SimpleNamespace

import numpy as np
import openai

from keyword_graph.config import KeywordGraphConfig
from keyword_graph.embedder import (
    OpenAIEmbeddingSource,
    SentenceTransformerSource,
    build_source,
    embed_labels,
)
from keyword_graph.errors import ConfigurationError, DimensionMismatchError, ProviderError


class _FakeEmbeddings:
    def __init__(self, vectors=None, error=None):
        self.vectors = vectors or {}
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        vec = self.vectors.get(kwargs["input"])
        data = [] if vec is None else [SimpleNamespace(embedding=vec, index=0)]
        return SimpleNamespace(data=data)


def _client(**kwargs):
    return SimpleNamespace(embeddings=_FakeEmbeddings(**kwargs))


class _ListSource:
    def __init__(self, vectors, fail_on=None):
        self.vectors = vectors
        self.fail_on = fail_on
        self.seen = []

    def generate(self, label):
        self.seen.append(label)
        if label == self.fail_on:
            raise ProviderError(f"quota exceeded for {label}", label=label)
        return np.asarray(self.vectors[label], dtype=np.float32)


class TestOpenAIEmbeddingSource(unittest.TestCase):
    def test_requests_dimensions_and_returns_float64(self):
        client = _client(vectors={"cat": [0.5, -0.5, 0.25]})
        source = OpenAIEmbeddingSource(client, "embed-deployment", dimensions=3)
        vec = source.generate("cat")
        self.assertEqual(vec.dtype, np.float64)
        np.testing.assert_array_equal(vec, [0.5, -0.5, 0.25])
        self.assertEqual(
            client.embeddings.calls,
            [{"model": "embed-deployment", "input": "cat", "dimensions": 3}],
        )

    def test_no_dimensions_argument_when_unset(self):
        client = _client(vectors={"cat": [1.0, 2.0]})
        OpenAIEmbeddingSource(client, "text-embedding-3-small").generate("cat")
        self.assertNotIn("dimensions", client.embeddings.calls[0])

    def test_openai_error_becomes_provider_error(self):
        cause = openai.OpenAIError("invalid api key")
        source = OpenAIEmbeddingSource(_client(error=cause), "embed-deployment", dimensions=3)
        with self.assertRaises(ProviderError) as ctx:
            source.generate("mouse")
        self.assertEqual(ctx.exception.label, "mouse")
        self.assertIs(ctx.exception.__cause__, cause)
        self.assertIn("mouse", str(ctx.exception))

    def test_empty_response_is_provider_error(self):
        source = OpenAIEmbeddingSource(_client(vectors={}), "embed-deployment")
        with self.assertRaises(ProviderError):
            source.generate("lion")


class TestEmbedLabels(unittest.TestCase):
    def test_sequential_in_label_order(self):
        source = _ListSource({"b": [0, 1], "a": [1, 0], "c": [1, 1]})
        table = embed_labels(["b", "a", "c"], source)
        self.assertEqual(source.seen, ["b", "a", "c"])
        self.assertEqual(table.labels, ["b", "a", "c"])
        self.assertEqual(table.matrix().dtype, np.float64)

    def test_provider_failure_stops_the_run(self):
        source = _ListSource({"a": [0, 1], "b": [1, 0], "c": [1, 1]}, fail_on="b")
        with self.assertRaises(ProviderError):
            embed_labels(["a", "b", "c"], source)
        self.assertEqual(source.seen, ["a", "b"])

    def test_dimension_mismatch(self):
        source = _ListSource({"cat": np.zeros(512), "mouse": np.zeros(256)})
        with self.assertRaises(DimensionMismatchError) as ctx:
            embed_labels(["cat", "mouse"], source)
        self.assertEqual((ctx.exception.expected, ctx.exception.actual), (512, 256))

    def test_no_labels(self):
        table = embed_labels([], _ListSource({}))
        self.assertEqual(table.n, 0)


class TestBuildSource(unittest.TestCase):
    def test_azure(self):
        cfg = KeywordGraphConfig(
            provider="azure",
            azure_endpoint="https://example.openai.azure.com/",
            azure_api_key="test-key",
            azure_embedding_deployment="text-embedding-3-small",
            dimensions=512,
        )
        source = build_source(cfg)
        self.assertIsInstance(source, OpenAIEmbeddingSource)
        self.assertEqual(source.model, "text-embedding-3-small")

    def test_openai(self):
        cfg = KeywordGraphConfig(provider="openai", openai_api_key="sk-test")
        source = build_source(cfg)
        self.assertIsInstance(source, OpenAIEmbeddingSource)
        self.assertEqual(source.model, "text-embedding-3-small")

    def test_sentence_transformers_is_lazy(self):
        cfg = KeywordGraphConfig(provider="sentence-transformers", embedding_model="all-MiniLM-L6-v2")
        source = build_source(cfg)
        self.assertIsInstance(source, SentenceTransformerSource)
        self.assertEqual(source.model, "all-MiniLM-L6-v2")

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError):
            build_source(KeywordGraphConfig(provider="pinecone"))


if __name__ == "__main__":
    unittest.main()
