"""HTTP route handlers for the rewriting API."""

from __future__ import annotations

from typing import Any, Dict, Type

import orjson
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from rewriter import commands
from rewriter.config import Settings
from rewriter.profiles.models import Profile
from rewriter.settings_store import SettingsStore, SummarizationSettings
from rewriter.summarizer.manager import SummarizationManager

from .schemas import (
    ActiveProfileUpdateModel,
    ApiTypeUpdateModel,
    AvailabilityModel,
    EnabledUpdateModel,
    EndpointUpdateModel,
    ModelListModel,
    ModelUpdateModel,
    ProcessRequestModel,
    ProcessResponseModel,
    ProfileListModel,
    ProfileRequestModel,
    TimeoutUpdateModel,
)


router = APIRouter()


def get_store(request: Request) -> SettingsStore:
    return request.app.state.store


def get_manager(request: Request) -> SummarizationManager:
    return request.app.state.summarization_manager


async def _load_request_model(
    http_request: Request, model_cls: Type[BaseModel], settings: Settings
) -> BaseModel:
    header_length = http_request.headers.get("content-length")
    if header_length:
        try:
            content_length = int(header_length)
        except ValueError:
            content_length = None
        else:
            if content_length > settings.max_payload_bytes:
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail={
                        "error": "payload_too_large",
                        "limit_bytes": settings.max_payload_bytes,
                    },
                )

    body_bytes = await http_request.body()
    if body_bytes and len(body_bytes) > settings.max_payload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": "payload_too_large",
                "limit_bytes": settings.max_payload_bytes,
            },
        )

    if not body_bytes:
        data: Dict[str, Any] = {}
    else:
        try:
            data = orjson.loads(body_bytes)
        except orjson.JSONDecodeError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "invalid_json", "details": str(exc)},
            ) from exc

    try:
        return model_cls.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def load_process_request(http_request: Request) -> ProcessRequestModel:
    settings: Settings = http_request.app.state.settings
    return await _load_request_model(http_request, ProcessRequestModel, settings)


async def load_profile_request(http_request: Request) -> ProfileRequestModel:
    settings: Settings = http_request.app.state.settings
    return await _load_request_model(http_request, ProfileRequestModel, settings)


@router.post("/v1/process", response_model=ProcessResponseModel)
async def process_text(
    process_request: ProcessRequestModel = Depends(load_process_request),
    manager: SummarizationManager = Depends(get_manager),
):
    profile_id = process_request.profile
    if profile_id is None:
        profile_id = manager.resolve_active_profile()
    text = await manager.process(process_request.text, profile_id)
    return ProcessResponseModel(text=text, profile=profile_id)


@router.get("/v1/profiles", response_model=ProfileListModel)
async def list_profiles(manager: SummarizationManager = Depends(get_manager)):
    profiles = sorted(commands.list_profiles(manager), key=lambda p: p.id)
    return ProfileListModel(profiles=profiles)


@router.post("/v1/profiles", response_model=Profile)
async def save_profile(
    profile_request: ProfileRequestModel = Depends(load_profile_request),
    store: SettingsStore = Depends(get_store),
    manager: SummarizationManager = Depends(get_manager),
):
    return commands.save_custom_profile(store, manager, profile_request.to_domain())


@router.delete("/v1/profiles/{profile_id:path}", response_model=SummarizationSettings)
async def delete_profile(
    profile_id: str,
    store: SettingsStore = Depends(get_store),
    manager: SummarizationManager = Depends(get_manager),
):
    return commands.delete_custom_profile(store, manager, profile_id)


@router.get("/v1/settings", response_model=SummarizationSettings)
async def read_settings(store: SettingsStore = Depends(get_store)):
    return store.get()


@router.put("/v1/settings/enabled", response_model=SummarizationSettings)
async def update_enabled(
    body: EnabledUpdateModel, store: SettingsStore = Depends(get_store)
):
    return commands.set_summarization_enabled(store, body.enabled)


@router.put("/v1/settings/active-profile", response_model=SummarizationSettings)
async def update_active_profile(
    body: ActiveProfileUpdateModel, store: SettingsStore = Depends(get_store)
):
    return commands.set_active_profile(store, body.profile_id)


@router.put("/v1/settings/endpoint", response_model=SummarizationSettings)
async def update_endpoint(
    body: EndpointUpdateModel, store: SettingsStore = Depends(get_store)
):
    return commands.set_llm_endpoint(store, body.endpoint)


@router.put("/v1/settings/model", response_model=SummarizationSettings)
async def update_model(body: ModelUpdateModel, store: SettingsStore = Depends(get_store)):
    return commands.set_llm_model(store, body.model)


@router.put("/v1/settings/api-type", response_model=SummarizationSettings)
async def update_api_type(
    body: ApiTypeUpdateModel, store: SettingsStore = Depends(get_store)
):
    return commands.set_llm_api_type(store, body.api_type)


@router.put("/v1/settings/timeout", response_model=SummarizationSettings)
async def update_timeout(
    body: TimeoutUpdateModel, store: SettingsStore = Depends(get_store)
):
    return commands.set_llm_timeout(store, body.timeout)


@router.get("/v1/llm/status", response_model=AvailabilityModel)
async def llm_status(manager: SummarizationManager = Depends(get_manager)):
    return AvailabilityModel(available=await manager.check_availability())


@router.get("/v1/llm/models", response_model=ModelListModel)
async def llm_models(manager: SummarizationManager = Depends(get_manager)):
    return ModelListModel(models=await manager.list_models())
