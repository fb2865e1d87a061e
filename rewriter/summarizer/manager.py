"""Summarization manager: resolves profiles and dispatches to a backend."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from rewriter.config import Settings, get_settings
from rewriter.errors import BackendProtocolError, BackendTransportError
from rewriter.profiles.builtin import RAW_PROFILE_ID
from rewriter.profiles.loader import ProfileRegistry
from rewriter.profiles.models import Profile
from rewriter.settings_store import SettingsStore
from rewriter.summarizer.backends import get_adapter, select_backend
from rewriter.summarizer.backends.base import decode_json_response, strip_endpoint
from rewriter.summarizer.models import BackendRequest

logger = logging.getLogger(__name__)


class SummarizationManager:
    """Rewrites text with a named profile through the configured LLM backend."""

    def __init__(
        self,
        store: SettingsStore,
        registry: Optional[ProfileRegistry] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize summarization manager.

        Args:
            store: Settings store holding endpoint, model and custom profiles
            registry: Profile registry (default built from the store)
            settings: Service settings (default from get_settings)
            transport: Optional httpx transport for the shared client
        """
        self._settings = settings or get_settings()
        self._store = store
        self._registry = registry or ProfileRegistry.from_settings(
            store.get(), lock_timeout=self._settings.registry_lock_timeout_seconds
        )
        self._connect_timeout = self._settings.llm_connect_timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._connect_timeout),
            transport=transport,
        )

    @property
    def registry(self) -> ProfileRegistry:
        return self._registry

    async def aclose(self) -> None:
        await self._client.aclose()

    def reload_profiles(self) -> None:
        """Rebuild the registry from the current settings record."""
        self._registry.reload(self._store.get())

    def list_profiles(self) -> List[Profile]:
        return self._registry.list_profiles()

    def _request_timeout(self, seconds: int) -> httpx.Timeout:
        return httpx.Timeout(float(seconds), connect=self._connect_timeout)

    async def process(self, raw_text: str, profile_id: str) -> str:
        """
        Rewrite ``raw_text`` using the profile ``profile_id``.

        Raises:
            ProfileNotFoundError: Unknown profile id
            BackendTransportError: Backend unreachable
            BackendProtocolError: Non-2xx status or malformed body
            EmptyResponseError: Backend returned no choices
        """
        profile = self._registry.get(profile_id)

        if profile.id == RAW_PROFILE_ID:
            logger.debug("Raw profile selected, bypassing LLM processing")
            return raw_text

        current = self._store.get()
        endpoint = current.llm_endpoint
        model = current.llm_model
        backend_type = select_backend(endpoint, current.llm_api_type)
        adapter = get_adapter(backend_type)

        logger.debug(
            f"Processing with profile '{profile.name}', model '{model}', "
            f"API type: {backend_type.value}"
        )

        user_prompt = profile.format_prompt(raw_text)
        request = adapter.build_request(
            endpoint, model, profile.system_prompt, user_prompt
        )
        response = await self._post(
            request,
            adapter.display_name,
            self._request_timeout(current.llm_timeout_seconds),
        )
        processed_text = adapter.parse_response(response).strip()

        logger.info(
            f"{adapter.display_name} processing complete: "
            f"{len(user_prompt)} chars -> {len(processed_text)} chars"
        )
        return processed_text

    def resolve_active_profile(self) -> str:
        """
        Id of the profile ``process_active`` applies.

        Raw when summarization is disabled or the active id is unknown.
        """
        current = self._store.get()
        if not current.enable_summarization:
            logger.debug("Summarization disabled, using raw profile")
            return RAW_PROFILE_ID

        profile_id = current.active_profile_id
        if not self._registry.contains(profile_id):
            logger.warning(
                f"Active profile '{profile_id}' not found, falling back to '{RAW_PROFILE_ID}'"
            )
            return RAW_PROFILE_ID
        return profile_id

    async def process_active(self, raw_text: str) -> str:
        """Rewrite ``raw_text`` with the active profile, if summarization is on."""
        return await self.process(raw_text, self.resolve_active_profile())

    async def _post(
        self, request: BackendRequest, backend: str, timeout: httpx.Timeout
    ) -> httpx.Response:
        logger.debug(f"Sending {backend} request to {request.url}")
        try:
            return await self._client.post(
                request.url, json=request.payload, timeout=timeout
            )
        except (httpx.TransportError, httpx.InvalidURL) as e:
            logger.error(f"{backend} request failed: {e}")
            raise BackendTransportError(f"Failed to connect to {backend}: {e}") from e

    async def check_availability(self) -> bool:
        """Check ``/api/version``; never raises."""
        endpoint = self._store.get().llm_endpoint
        url = f"{strip_endpoint(endpoint)}/api/version"

        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"LLM service unavailable: {e}")
            return False

        if response.is_success:
            logger.info(f"LLM service is available at {endpoint}")
            return True
        logger.warning(f"LLM service returned status {response.status_code}")
        return False

    async def list_models(self) -> List[str]:
        """
        List model names reported by ``/api/tags``.

        Raises:
            BackendTransportError: Backend unreachable
            BackendProtocolError: Non-2xx status or unexpected body
        """
        current = self._store.get()
        url = f"{strip_endpoint(current.llm_endpoint)}/api/tags"
        logger.debug(f"Fetching available models from {url}")

        try:
            response = await self._client.get(
                url, timeout=self._request_timeout(current.llm_timeout_seconds)
            )
        except (httpx.TransportError, httpx.InvalidURL) as e:
            logger.error(f"Failed to fetch models: {e}")
            raise BackendTransportError(
                f"Failed to connect to LLM service: {e}"
            ) from e

        data = decode_json_response(response, "LLM service")
        try:
            model_names = [model["name"] for model in data["models"]]
        except (KeyError, TypeError) as e:
            logger.error(f"Failed to parse models response: {e!r}")
            raise BackendProtocolError(
                f"Invalid response format: {e!r}",
                body=response.text,
            ) from e
        if not all(isinstance(name, str) for name in model_names):
            logger.error("Models response contains a non-string name")
            raise BackendProtocolError(
                "Invalid response format: model name is not a string",
                body=response.text,
            )

        logger.info(f"Found {len(model_names)} available models")
        return model_names
