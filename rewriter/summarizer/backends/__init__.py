"""Backend selection and the adapter for each wire dialect."""

from typing import Dict

from rewriter.summarizer.backends.base import BackendAdapter
from rewriter.summarizer.backends.ollama import OllamaAdapter
from rewriter.summarizer.backends.openai_compat import OpenAICompatibleAdapter
from rewriter.summarizer.models import BackendType

_ADAPTERS: Dict[BackendType, BackendAdapter] = {
    adapter.backend_type: adapter
    for adapter in (OllamaAdapter(), OpenAICompatibleAdapter())
}


def select_backend(endpoint: str, hint: BackendType) -> BackendType:
    """
    Resolve the backend dialect for ``endpoint``.

    A ``/v1/`` path segment forces OpenAI-compatible whatever the hint says;
    otherwise the explicit hint decides.
    """
    if "/v1/" in endpoint or hint == BackendType.OPENAI:
        return BackendType.OPENAI
    return BackendType.OLLAMA


def get_adapter(backend_type: BackendType) -> BackendAdapter:
    return _ADAPTERS[backend_type]


__all__ = [
    "BackendAdapter",
    "OllamaAdapter",
    "OpenAICompatibleAdapter",
    "get_adapter",
    "select_backend",
]
