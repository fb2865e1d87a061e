"""OpenAI-compatible chat completions adapter (OpenAI, Mistral, llama.cpp, vLLM...)."""

from typing import Any, Dict, List

import httpx

from rewriter.errors import BackendProtocolError, EmptyResponseError
from rewriter.summarizer.backends.base import (
    BackendAdapter,
    decode_json_response,
    strip_endpoint,
)
from rewriter.summarizer.models import BackendRequest, BackendType

TEMPERATURE = 0.3
MAX_TOKENS = 1000


class OpenAICompatibleAdapter(BackendAdapter):
    """Adapter for any server exposing ``/chat/completions``."""

    backend_type = BackendType.OPENAI
    display_name = "OpenAI API"

    def endpoint_url(self, endpoint: str) -> str:
        base = strip_endpoint(endpoint)
        if base.endswith("/v1"):
            base = base[: -len("/v1")]
        return f"{base}/chat/completions"

    def build_request(
        self, endpoint: str, model: str, system_prompt: str, user_prompt: str
    ) -> BackendRequest:
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        return BackendRequest(url=self.endpoint_url(endpoint), payload=payload)

    def parse_response(self, response: httpx.Response) -> str:
        data = decode_json_response(response, self.display_name)
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list):
            raise BackendProtocolError(
                "Invalid response from OpenAI API: missing 'choices' list",
                body=response.text,
            )
        if not choices:
            raise EmptyResponseError("No choices in OpenAI response")

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, TypeError) as e:
            raise BackendProtocolError(
                f"Invalid response from OpenAI API: {e!r}", body=response.text
            ) from e
        if not isinstance(content, str):
            raise BackendProtocolError(
                "Invalid response from OpenAI API: message content is not text",
                body=response.text,
            )
        return content.strip()
