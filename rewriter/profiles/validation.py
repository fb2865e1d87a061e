"""Checks applied to user profiles before they reach the registry."""

from rewriter.errors import ProfileValidationError
from rewriter.profiles.models import PLACEHOLDER, Profile


def validate_custom_profile(profile: Profile) -> None:
    """Raise ProfileValidationError if ``profile`` can't be saved."""
    if not profile.id.strip():
        raise ProfileValidationError("Profile ID cannot be empty")
    if not profile.name.strip():
        raise ProfileValidationError("Profile name cannot be empty")
    if PLACEHOLDER not in profile.user_prompt_template:
        raise ProfileValidationError(
            f"User prompt template must contain {PLACEHOLDER} placeholder"
        )


def ensure_deletable(profile: Profile) -> None:
    if profile.is_built_in:
        raise ProfileValidationError(f"Cannot delete built-in profile: {profile.id}")
