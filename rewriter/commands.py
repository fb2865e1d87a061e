"""
Operations exposed to clients: setting mutators and custom profile management.

Each mutator persists one field of the settings record. Profile saves and
deletes are validated here, written to the store, then the manager's
registry is rebuilt from the new record.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from rewriter.errors import ProfileNotFoundError, SettingsValidationError
from rewriter.profiles.builtin import RAW_PROFILE_ID
from rewriter.profiles.models import Profile, utc_timestamp
from rewriter.profiles.validation import ensure_deletable, validate_custom_profile
from rewriter.settings_store import SettingsStore, SummarizationSettings
from rewriter.summarizer.manager import SummarizationManager
from rewriter.summarizer.models import BackendType

logger = logging.getLogger(__name__)


def set_summarization_enabled(
    store: SettingsStore, enabled: bool
) -> SummarizationSettings:
    return store.update(enable_summarization=enabled)


def set_active_profile(store: SettingsStore, profile_id: str) -> SummarizationSettings:
    return store.update(active_profile_id=profile_id)


def set_llm_endpoint(store: SettingsStore, endpoint: str) -> SummarizationSettings:
    return store.update(llm_endpoint=endpoint)


def set_llm_model(store: SettingsStore, model: str) -> SummarizationSettings:
    return store.update(llm_model=model)


def set_llm_api_type(
    store: SettingsStore, api_type: BackendType
) -> SummarizationSettings:
    return store.update(llm_api_type=api_type)


def set_llm_timeout(store: SettingsStore, timeout: int) -> SummarizationSettings:
    if timeout < 1:
        raise SettingsValidationError("Timeout must be at least 1 second")
    return store.update(llm_timeout_seconds=timeout)


def save_custom_profile(
    store: SettingsStore, manager: SummarizationManager, profile: Profile
) -> Profile:
    """
    Create or update a custom profile.

    The saved copy is never flagged built-in; an update keeps the original
    ``created_at`` and refreshes ``updated_at``.

    Raises:
        ProfileValidationError: Empty id or name, or missing placeholder
    """
    validate_custom_profile(profile)

    settings = store.get()
    existing = next((p for p in settings.custom_profiles if p.id == profile.id), None)
    now = utc_timestamp()
    saved = profile.model_copy(
        update={
            "is_built_in": False,
            "created_at": (existing.created_at if existing else None)
            or profile.created_at
            or now,
            "updated_at": now,
        }
    )

    if existing is not None:
        custom_profiles = [
            saved if p.id == profile.id else p for p in settings.custom_profiles
        ]
        logger.info(f"Updating custom profile '{saved.id}'")
    else:
        custom_profiles = [*settings.custom_profiles, saved]
        logger.info(f"Adding custom profile '{saved.id}'")

    store.update(custom_profiles=custom_profiles)
    manager.reload_profiles()
    return saved


def delete_custom_profile(
    store: SettingsStore, manager: SummarizationManager, profile_id: str
) -> SummarizationSettings:
    """
    Delete a custom profile by id.

    Raises:
        ProfileValidationError: The profile is built-in
        ProfileNotFoundError: No profile has this id
    """
    profile = manager.registry.get(profile_id)
    ensure_deletable(profile)

    settings = store.get()
    custom_profiles = [p for p in settings.custom_profiles if p.id != profile_id]
    if len(custom_profiles) == len(settings.custom_profiles):
        raise ProfileNotFoundError(profile_id)

    changes: Dict[str, Any] = {"custom_profiles": custom_profiles}
    if settings.active_profile_id == profile_id:
        logger.info(
            f"Deleted profile '{profile_id}' was active, switching to '{RAW_PROFILE_ID}'"
        )
        changes["active_profile_id"] = RAW_PROFILE_ID

    updated = store.update(**changes)
    manager.reload_profiles()
    logger.info(f"Deleted custom profile '{profile_id}'")
    return updated


def list_profiles(manager: SummarizationManager) -> List[Profile]:
    return manager.list_profiles()
