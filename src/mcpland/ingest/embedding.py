"""Embedding function backed by LiteLLM.

The store treats the embedding function as an opaque async callable
``text -> list[float]``; this module builds the default one.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import litellm

EmbedFn = Callable[[str], Awaitable[list[float]]]

DEFAULT_EMBEDDING_MODEL = "openai/text-embedding-3-small"

_PROVIDER_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation."""

    model: str = DEFAULT_EMBEDDING_MODEL
    dimensions: int | None = None


def provider_of(model: str) -> str:
    """Return the provider prefix of a LiteLLM model string ('' if none)."""
    return model.split("/")[0].lower() if "/" in model else ""


def check_api_key(model: str) -> None:
    """Raise RuntimeError if no API key is available for *model*'s provider."""
    provider = provider_of(model)
    required_env = _PROVIDER_ENV.get(provider)
    if required_env and not os.environ.get(required_env):
        raise RuntimeError(
            f"No API key found for provider '{provider}'. "
            f"Set the {required_env} environment variable."
        )


def make_embed_fn(config: EmbeddingConfig | None = None) -> EmbedFn:
    """Return an async embedding function for *config*.

    The API key check runs on the first call so that stores can be opened
    (e.g. for ``mcpland status``) without credentials.
    """
    cfg = config or EmbeddingConfig()
    checked = False

    async def embed(text: str) -> list[float]:
        nonlocal checked
        if not checked:
            check_api_key(cfg.model)
            checked = True
        kwargs = {"dimensions": cfg.dimensions} if cfg.dimensions else {}
        response = await litellm.aembedding(model=cfg.model, input=[text], **kwargs)
        return list(response.data[0]["embedding"])

    return embed
