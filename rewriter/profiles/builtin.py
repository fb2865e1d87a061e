"""Built-in profile catalogue shipped as YAML files."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Tuple

import yaml
from pydantic import ValidationError

from rewriter.profiles.models import Profile

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).parent / "builtin"

RAW_PROFILE_ID = "raw"
BUILT_IN_PROFILE_IDS: Tuple[str, ...] = (
    "professional",
    "llm_agent",
    "email",
    "notes",
    "code_comments",
    RAW_PROFILE_ID,
)


def load_profiles_from_directory(profiles_dir: str | Path) -> list[Profile]:
    """
    Load every YAML profile in ``profiles_dir``, flagged as built-in.

    Args:
        profiles_dir: Path to directory containing profile YAML files

    Raises:
        FileNotFoundError: If the directory doesn't exist
        yaml.YAMLError: If a file is not valid YAML
        ValidationError: If a profile fails validation
    """
    profiles_path = Path(profiles_dir)
    if not profiles_path.is_dir():
        raise FileNotFoundError(f"Profiles directory not found: {profiles_dir}")

    profiles = []
    for yaml_file in sorted(profiles_path.glob("*.yaml")):
        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"YAML parse error in {yaml_file}: {e}")
            raise

        if not data:
            logger.warning(f"Empty profile file: {yaml_file}")
            continue

        try:
            profile = Profile.model_validate({**data, "is_built_in": True})
        except ValidationError as e:
            logger.error(f"Validation error in {yaml_file}: {e}")
            raise

        profiles.append(profile)
        logger.debug(f"Loaded built-in profile: {profile.id} from {yaml_file}")

    return profiles


@lru_cache
def get_built_in_profiles() -> Tuple[Profile, ...]:
    """Return the six built-in profiles, in catalogue order."""
    by_id = {p.id: p for p in load_profiles_from_directory(BUILTIN_DIR)}
    missing = [pid for pid in BUILT_IN_PROFILE_IDS if pid not in by_id]
    unexpected = sorted(set(by_id) - set(BUILT_IN_PROFILE_IDS))
    if missing or unexpected:
        raise RuntimeError(
            f"Built-in profile catalogue mismatch (missing={missing}, unexpected={unexpected})"
        )
    return tuple(by_id[pid] for pid in BUILT_IN_PROFILE_IDS)
