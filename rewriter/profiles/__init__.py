"""Profile system for the rewriter."""

from rewriter.profiles.builtin import (
    BUILT_IN_PROFILE_IDS,
    RAW_PROFILE_ID,
    get_built_in_profiles,
)
from rewriter.profiles.loader import ProfileRegistry, load_profiles
from rewriter.profiles.models import PLACEHOLDER, Profile

__all__ = [
    "BUILT_IN_PROFILE_IDS",
    "PLACEHOLDER",
    "Profile",
    "ProfileRegistry",
    "RAW_PROFILE_ID",
    "get_built_in_profiles",
    "load_profiles",
]
