"""Profile data models for the rewriter."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER = "{transcription}"


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class Profile(BaseModel):
    """A rewriting style: system instruction plus user prompt template."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique profile identifier")
    name: str = Field(..., description="Human-readable name")
    description: str = Field(default="", description="Profile description")
    system_prompt: str = Field(
        default="", description="System instruction; empty means none"
    )
    user_prompt_template: str = Field(
        default="", description=f"User prompt containing the {PLACEHOLDER} token"
    )
    is_built_in: bool = Field(default=False)
    created_at: Optional[str] = Field(default=None)
    updated_at: Optional[str] = Field(default=None)

    @classmethod
    def new_custom(
        cls,
        id: str,
        name: str,
        description: str,
        system_prompt: str,
        user_prompt_template: str,
    ) -> "Profile":
        now = utc_timestamp()
        return cls(
            id=id,
            name=name,
            description=description,
            system_prompt=system_prompt,
            user_prompt_template=user_prompt_template,
            is_built_in=False,
            created_at=now,
            updated_at=now,
        )

    def format_prompt(self, raw_text: str) -> str:
        """Substitute every placeholder in the template with ``raw_text``."""
        return self.user_prompt_template.replace(PLACEHOLDER, raw_text)
