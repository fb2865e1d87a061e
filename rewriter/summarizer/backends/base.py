"""Abstract base class for LLM backend adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
import orjson

from rewriter.errors import BackendProtocolError
from rewriter.summarizer.models import BackendRequest, BackendType

logger = logging.getLogger(__name__)


def strip_endpoint(endpoint: str) -> str:
    return endpoint.rstrip("/")


def decode_json_response(response: httpx.Response, backend: str) -> Any:
    """
    Check the status of ``response`` and decode its JSON body.

    Raises:
        BackendProtocolError: On a non-2xx status or a body that isn't JSON
    """
    if not response.is_success:
        body = response.text
        logger.error(f"{backend} returned error {response.status_code}: {body}")
        raise BackendProtocolError(
            f"{backend} error {response.status_code}: {body}",
            status_code=response.status_code,
            body=body,
        )

    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as e:
        logger.error(f"Failed to parse {backend} response: {e}")
        raise BackendProtocolError(
            f"Invalid response from {backend}: {e}", body=response.text
        ) from e


class BackendAdapter(ABC):
    """Translates a prompt pair into one backend's wire format and back."""

    backend_type: BackendType
    display_name: str

    @abstractmethod
    def endpoint_url(self, endpoint: str) -> str:
        """Full generation URL for a configured base ``endpoint``."""

    @abstractmethod
    def build_request(
        self, endpoint: str, model: str, system_prompt: str, user_prompt: str
    ) -> BackendRequest:
        """Build the request for one generation call."""

    @abstractmethod
    def parse_response(self, response: httpx.Response) -> str:
        """Extract the generated text from a backend response."""
