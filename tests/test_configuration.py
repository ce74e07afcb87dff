"""Versioned branding/content configuration and business presets."""
import pytest

from app.core.presets import BUSINESS_PRESETS, DEFAULT_CONFIGURATION
from app.exceptions.errors import NotFoundError, PermissionDeniedError, VersionConflictError
from app.services.configuration_service import ConfigurationService


async def test_defaults_are_version_zero(db):
    value, version = await ConfigurationService.get(db, "branding")

    assert version == 0
    assert value == DEFAULT_CONFIGURATION["branding"]


async def test_unknown_key_is_not_found(db):
    with pytest.raises(NotFoundError):
        await ConfigurationService.get(db, "pricing")


async def test_update_merges_and_appends_version(db, admin):
    entry = await ConfigurationService.update(db, admin, "branding", {"primary_color": "#000000"}, expected_version=0)

    assert entry.version == 1
    assert entry.value["primary_color"] == "#000000"
    assert entry.value["company_name"] == DEFAULT_CONFIGURATION["branding"]["company_name"]

    value, version = await ConfigurationService.get(db, "branding")
    assert version == 1
    assert value["primary_color"] == "#000000"


async def test_stale_expected_version_conflicts(db, admin):
    await ConfigurationService.update(db, admin, "content", {"hero_title": "First"}, expected_version=0)

    with pytest.raises(VersionConflictError):
        await ConfigurationService.update(db, admin, "content", {"hero_title": "Second"}, expected_version=0)

    value, version = await ConfigurationService.get(db, "content")
    assert version == 1
    assert value["hero_title"] == "First"


async def test_update_without_expected_version_always_appends(db, admin):
    await ConfigurationService.update(db, admin, "content", {"hero_title": "One"})
    entry = await ConfigurationService.update(db, admin, "content", {"hero_title": "Two"})

    assert entry.version == 2
    history = await ConfigurationService.history(db, "content")
    assert [item.version for item in history] == [2, 1]
    assert history[1].value["hero_title"] == "One"


async def test_update_requires_admin(db, trainer):
    with pytest.raises(PermissionDeniedError):
        await ConfigurationService.update(db, trainer, "branding", {"primary_color": "#ffffff"})


async def test_apply_preset_writes_every_key(db, admin):
    entries = await ConfigurationService.apply_preset(db, admin, "pilates")

    assert {entry.key for entry in entries} == set(DEFAULT_CONFIGURATION)
    assert all(entry.preset_id == "pilates" for entry in entries)
    value, version = await ConfigurationService.get(db, "branding")
    assert version == 1
    assert value == BUSINESS_PRESETS["pilates"]["branding"]


async def test_apply_unknown_preset_is_not_found(db, admin):
    with pytest.raises(NotFoundError):
        await ConfigurationService.apply_preset(db, admin, "bowling")
