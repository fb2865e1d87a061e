import pytest

from rewriter import commands
from rewriter.errors import (
    ProfileNotFoundError,
    ProfileValidationError,
    SettingsValidationError,
)
from rewriter.profiles.models import Profile
from rewriter.summarizer.models import BackendType


def _profile(profile_id="standup", template="Summarize my standup: {transcription}"):
    return Profile(
        id=profile_id,
        name="Standup",
        description="Daily standup notes",
        system_prompt="You write standup updates.",
        user_prompt_template=template,
    )


@pytest.mark.anyio
async def test_save_custom_profile_persists_and_reloads(store, manager):
    saved = commands.save_custom_profile(store, manager, _profile())

    assert not saved.is_built_in
    assert saved.created_at and saved.updated_at
    assert [p.id for p in store.get().custom_profiles] == ["standup"]
    assert manager.registry.get("standup").name == "Standup"
    assert len(commands.list_profiles(manager)) == 7


@pytest.mark.anyio
async def test_save_existing_profile_updates_in_place(store, manager):
    first = commands.save_custom_profile(store, manager, _profile())
    renamed = _profile().model_copy(update={"name": "Standup v2"})

    second = commands.save_custom_profile(store, manager, renamed)

    custom = store.get().custom_profiles
    assert len(custom) == 1
    assert custom[0].name == "Standup v2"
    assert second.created_at == first.created_at
    assert manager.registry.get("standup").name == "Standup v2"


@pytest.mark.anyio
async def test_saved_profile_is_never_flagged_built_in(store, manager):
    sneaky = _profile().model_copy(update={"is_built_in": True})
    saved = commands.save_custom_profile(store, manager, sneaky)
    assert saved.is_built_in is False
    commands.delete_custom_profile(store, manager, "standup")


@pytest.mark.anyio
async def test_save_without_placeholder_is_rejected(store, manager):
    with pytest.raises(ProfileValidationError):
        commands.save_custom_profile(
            store, manager, _profile(template="Summarize my standup")
        )
    assert store.get().custom_profiles == []
    assert len(manager.list_profiles()) == 6


@pytest.mark.anyio
async def test_save_with_empty_id_is_rejected(store, manager):
    with pytest.raises(ProfileValidationError):
        commands.save_custom_profile(store, manager, _profile(profile_id=""))
    assert store.get().custom_profiles == []


@pytest.mark.anyio
@pytest.mark.parametrize("profile_id", ["raw", "professional", "email"])
async def test_delete_built_in_is_rejected(store, manager, profile_id):
    before = sorted(manager.registry.get_available_ids())
    with pytest.raises(ProfileValidationError):
        commands.delete_custom_profile(store, manager, profile_id)
    assert sorted(manager.registry.get_available_ids()) == before


@pytest.mark.anyio
async def test_delete_unknown_profile_raises_not_found(store, manager):
    with pytest.raises(ProfileNotFoundError):
        commands.delete_custom_profile(store, manager, "nope")


@pytest.mark.anyio
async def test_delete_custom_profile(store, manager):
    commands.save_custom_profile(store, manager, _profile())
    commands.save_custom_profile(store, manager, _profile("retro"))
    commands.set_active_profile(store, "notes")

    settings = commands.delete_custom_profile(store, manager, "standup")

    assert [p.id for p in settings.custom_profiles] == ["retro"]
    assert settings.active_profile_id == "notes"
    assert not manager.registry.contains("standup")


@pytest.mark.anyio
async def test_delete_active_profile_resets_to_raw(store, manager):
    commands.save_custom_profile(store, manager, _profile())
    commands.set_active_profile(store, "standup")

    settings = commands.delete_custom_profile(store, manager, "standup")

    assert settings.active_profile_id == "raw"
    assert store.get().active_profile_id == "raw"


@pytest.mark.anyio
async def test_deleting_override_restores_built_in(store, manager):
    override = _profile("email").model_copy(update={"name": "My Email"})
    commands.save_custom_profile(store, manager, override)
    assert manager.registry.get("email").name == "My Email"

    commands.delete_custom_profile(store, manager, "email")

    restored = manager.registry.get("email")
    assert restored.is_built_in
    assert restored.name == "Email"


def test_setting_mutators_persist_each_field(store):
    commands.set_summarization_enabled(store, True)
    commands.set_active_profile(store, "email")
    commands.set_llm_endpoint(store, "http://gpu-box:8080/v1/")
    commands.set_llm_model(store, "mistral-small")
    commands.set_llm_api_type(store, BackendType.OPENAI)
    commands.set_llm_timeout(store, 90)

    settings = store.get()
    assert settings.enable_summarization is True
    assert settings.active_profile_id == "email"
    assert settings.llm_endpoint == "http://gpu-box:8080/v1/"
    assert settings.llm_model == "mistral-small"
    assert settings.llm_api_type == BackendType.OPENAI
    assert settings.llm_timeout_seconds == 90


def test_timeout_must_be_positive(store):
    with pytest.raises(SettingsValidationError):
        commands.set_llm_timeout(store, 0)
    assert store.get().llm_timeout_seconds == 30
