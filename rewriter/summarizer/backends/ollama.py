"""Ollama-native generation adapter (``/api/generate``)."""

import logging

import httpx

from rewriter.errors import BackendProtocolError
from rewriter.summarizer.backends.base import (
    BackendAdapter,
    decode_json_response,
    strip_endpoint,
)
from rewriter.summarizer.models import BackendRequest, BackendType

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
TOP_P = 0.9


class OllamaAdapter(BackendAdapter):
    """Ollama local LLM adapter."""

    backend_type = BackendType.OLLAMA
    display_name = "Ollama"

    def endpoint_url(self, endpoint: str) -> str:
        return f"{strip_endpoint(endpoint)}/api/generate"

    def build_request(
        self, endpoint: str, model: str, system_prompt: str, user_prompt: str
    ) -> BackendRequest:
        # /api/generate takes a single prompt, so the system text is inlined
        if system_prompt:
            prompt = f"System: {system_prompt}\n\nUser: {user_prompt}"
        else:
            prompt = user_prompt

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": TEMPERATURE,
                "top_p": TOP_P,
            },
        }
        return BackendRequest(url=self.endpoint_url(endpoint), payload=payload)

    def parse_response(self, response: httpx.Response) -> str:
        data = decode_json_response(response, self.display_name)
        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            raise BackendProtocolError(
                "Invalid response from Ollama: missing 'response' field",
                body=response.text,
            )
        if not isinstance(data.get("done"), bool):
            raise BackendProtocolError(
                "Invalid response from Ollama: missing 'done' flag",
                body=response.text,
            )
        if not data["done"]:
            logger.warning("Ollama reported an unfinished generation")
        return data["response"].strip()
