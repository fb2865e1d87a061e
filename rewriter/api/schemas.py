from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rewriter.profiles.models import Profile
from rewriter.summarizer.models import BackendType


class ProcessRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = Field(..., description="Raw transcription to rewrite.")
    profile: Optional[str] = Field(
        default=None,
        description="Profile id; the active profile applies when omitted.",
    )


class ProcessResponseModel(BaseModel):
    text: str
    profile: str = Field(..., description="Id of the profile that was applied.")


class ProfileRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str = ""
    system_prompt: str = ""
    user_prompt_template: str

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip_identifiers(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    def to_domain(self) -> Profile:
        return Profile.new_custom(
            id=self.id,
            name=self.name,
            description=self.description,
            system_prompt=self.system_prompt,
            user_prompt_template=self.user_prompt_template,
        )


class ProfileListModel(BaseModel):
    profiles: List[Profile]


class EnabledUpdateModel(BaseModel):
    enabled: bool


class ActiveProfileUpdateModel(BaseModel):
    profile_id: str


class EndpointUpdateModel(BaseModel):
    endpoint: str


class ModelUpdateModel(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model: str


class ApiTypeUpdateModel(BaseModel):
    api_type: BackendType


class TimeoutUpdateModel(BaseModel):
    timeout: int


class AvailabilityModel(BaseModel):
    available: bool


class ModelListModel(BaseModel):
    models: List[str]
