"""Profile loading and registry management."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List

from rewriter.errors import ProfileNotFoundError, RegistryLockError
from rewriter.profiles.builtin import get_built_in_profiles
from rewriter.profiles.models import Profile

if TYPE_CHECKING:
    from rewriter.settings_store import SummarizationSettings

logger = logging.getLogger(__name__)


def load_profiles(custom_profiles: Iterable[Profile]) -> Dict[str, Profile]:
    """
    Build a complete id -> profile mapping.

    Built-ins are seeded first; custom profiles are inserted afterwards and
    replace any earlier entry with the same id.
    """
    profiles: Dict[str, Profile] = {}
    for profile in get_built_in_profiles():
        profiles[profile.id] = profile

    for profile in custom_profiles:
        if profile.id in profiles:
            logger.debug(f"Custom profile overrides existing id: {profile.id}")
        profiles[profile.id] = profile

    logger.info(f"Loaded {len(profiles)} profiles")
    return profiles


class ProfileRegistry:
    """Thread-safe registry of built-in and custom profiles."""

    def __init__(
        self,
        profiles: Dict[str, Profile] | None = None,
        lock_timeout: float = 5.0,
    ) -> None:
        self._profiles: Dict[str, Profile] = dict(profiles or {})
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    @classmethod
    def from_settings(
        cls, settings: SummarizationSettings, lock_timeout: float = 5.0
    ) -> ProfileRegistry:
        return cls(load_profiles(settings.custom_profiles), lock_timeout=lock_timeout)

    @contextmanager
    def _guard(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise RegistryLockError(
                f"Failed to acquire profile registry lock within {self._lock_timeout}s"
            )
        try:
            yield
        finally:
            self._lock.release()

    def reload(self, settings: SummarizationSettings) -> None:
        """Replace the whole mapping with one freshly built from ``settings``."""
        new_profiles = load_profiles(settings.custom_profiles)
        with self._guard():
            self._profiles = new_profiles

    def get(self, profile_id: str) -> Profile:
        """
        Get a profile by ID.

        Raises:
            ProfileNotFoundError: If no profile has this id
        """
        with self._guard():
            profile = self._profiles.get(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def contains(self, profile_id: str) -> bool:
        with self._guard():
            return profile_id in self._profiles

    def list_profiles(self) -> List[Profile]:
        """Snapshot of every registered profile, in no particular order."""
        with self._guard():
            return list(self._profiles.values())

    def get_available_ids(self) -> List[str]:
        with self._guard():
            return list(self._profiles.keys())
