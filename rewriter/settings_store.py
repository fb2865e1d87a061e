"""Persisted user settings for rewriting (endpoint, model, profiles...)."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, List

import orjson
from pydantic import BaseModel, Field, ValidationError

from rewriter.profiles.builtin import RAW_PROFILE_ID
from rewriter.profiles.models import Profile
from rewriter.summarizer.models import BackendType

logger = logging.getLogger(__name__)


class SummarizationSettings(BaseModel):
    """The settings record consumed by the dispatcher and command layer."""

    enable_summarization: bool = False
    active_profile_id: str = RAW_PROFILE_ID
    llm_endpoint: str = "http://localhost:11434"
    llm_model: str = "llama3.2"
    llm_api_type: BackendType = BackendType.OLLAMA
    llm_timeout_seconds: int = Field(30, ge=1)
    custom_profiles: List[Profile] = Field(default_factory=list)


class SettingsStore:
    """
    JSON-file backed store for SummarizationSettings.

    Every write persists the full record; concurrent writers are serialised
    and the last one wins. With ``path=None`` the record is kept in memory.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._settings = self._read()

    def _read(self) -> SummarizationSettings:
        """
        Load the record from disk.

        Invalid custom profiles are dropped one by one; a file that can't be
        used at all falls back to defaults. Either way the original bytes are
        kept next to the file (``settings.json.bad``) before any later write
        replaces it.
        """
        if self._path is None or not self._path.exists():
            return SummarizationSettings()

        try:
            raw = self._path.read_bytes()
        except OSError as e:
            logger.warning(f"Ignoring unreadable settings file {self._path}: {e}")
            return SummarizationSettings()

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt settings file {self._path}: {e}")
            self._keep_backup(raw)
            return SummarizationSettings()

        if isinstance(data, dict) and isinstance(data.get("custom_profiles"), list):
            profiles = self._valid_profiles(data["custom_profiles"])
            if len(profiles) != len(data["custom_profiles"]):
                self._keep_backup(raw)
            data["custom_profiles"] = profiles

        try:
            return SummarizationSettings.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid settings file {self._path}: {e}")
            self._keep_backup(raw)
            return SummarizationSettings()

    def _valid_profiles(self, entries: List[Any]) -> List[Profile]:
        profiles = []
        for entry in entries:
            try:
                profiles.append(Profile.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Dropping invalid custom profile in {self._path}: {e}")
        return profiles

    def _keep_backup(self, raw: bytes) -> None:
        backup = self._path.with_suffix(self._path.suffix + ".bad")
        try:
            backup.write_bytes(raw)
        except OSError as e:
            logger.error(f"Could not back up settings file to {backup}: {e}")
            return
        logger.warning(f"Original settings kept at {backup}")

    def _persist(self, settings: SummarizationSettings) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_bytes(
            orjson.dumps(settings.model_dump(mode="json"), option=orjson.OPT_INDENT_2)
        )
        tmp_path.replace(self._path)

    def get(self) -> SummarizationSettings:
        with self._lock:
            return self._settings.model_copy(deep=True)

    def write(self, settings: SummarizationSettings) -> None:
        with self._lock:
            self._persist(settings)
            self._settings = settings.model_copy(deep=True)
        logger.debug("Settings written")

    def update(self, **changes: Any) -> SummarizationSettings:
        """Apply field changes to the current record, validate and persist it."""
        with self._lock:
            data = self._settings.model_dump()
            data.update(changes)
            settings = SummarizationSettings.model_validate(data)
            self._persist(settings)
            self._settings = settings
            return settings.model_copy(deep=True)
