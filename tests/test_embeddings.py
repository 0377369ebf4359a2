"""
Unit tests for OpenAI embeddings. The OpenAI client is patched.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from app.services.embeddings import embed_query, embed_texts


def _response(*vectors: tuple[int, list[float]]) -> SimpleNamespace:
    return SimpleNamespace(data=[SimpleNamespace(index=i, embedding=v) for i, v in vectors])


def test_embed_texts_batches_orders_and_normalizes() -> None:
    client = MagicMock()
    client.embeddings.create.side_effect = [
        # out of order within the batch
        _response((1, [0.0, 2.0]), (0, [3.0, 4.0])),
        _response((0, [0.0, 0.0])),
    ]
    with patch("app.services.embeddings.OpenAI", return_value=client):
        vectors = embed_texts(["a", "b", "c"], batch_size=2)
    assert vectors[0] == pytest.approx([0.6, 0.8])
    assert vectors[1] == pytest.approx([0.0, 1.0])
    assert vectors[2] == [0.0, 0.0]
    assert client.embeddings.create.call_count == 2
    assert client.embeddings.create.call_args_list[0].kwargs["input"] == ["a", "b"]


def test_embed_texts_empty_skips_api() -> None:
    with patch("app.services.embeddings.OpenAI") as mock_openai:
        assert embed_texts([]) == []
    mock_openai.assert_not_called()


def test_embed_query_returns_single_vector() -> None:
    with patch("app.services.embeddings.embed_texts", return_value=[[1.0, 0.0]]) as mock_embed:
        assert embed_query("bridge") == [1.0, 0.0]
    mock_embed.assert_called_once_with(["bridge"])
