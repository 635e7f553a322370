"""
Tests for the per-user builder session
"""

import pytest
from unittest.mock import AsyncMock

from mirai.schemas.resume import ContactInfo, Entry, ResumeFormState
from mirai.services.persistence_client import PersistenceClient, SaveState
from mirai.services.preview_document import PreviewMode
from mirai.services.preview_page import View
from mirai.services.resume_builder import VALIDATION_BLOCKED_MESSAGE, BuilderRegistry, ResumeBuilder


def _valid_state():
    return ResumeFormState(
        contactInfo=ContactInfo(email="jane@example.com", linkedin="https://linkedin.com/in/jane"),
        summary="Seasoned engineer.",
        skills="Python",
        experience=[
            Entry(title="Engineer", organization="Acme", startDate="2020", endDate="2022", description="Built things")
        ],
    )


def _builder(saver=None):
    builder = ResumeBuilder("user-1", "Jane Doe")
    builder.persistence = PersistenceClient(saver or AsyncMock(return_value={"id": "r1"}), notify=builder.notify)
    return builder


@pytest.mark.asyncio
async def test_load_with_saved_content_opens_preview_overridden():
    builder = _builder()
    await builder.load("# Saved resume")

    assert builder.loaded
    assert builder.active_view is View.PREVIEW
    assert builder.document.mode is PreviewMode.OVERRIDDEN
    assert builder.markdown == "# Saved resume"
    assert builder.page.soup.find(id="resume-pdf") is not None


@pytest.mark.asyncio
async def test_load_without_content_starts_on_empty_form():
    builder = _builder()
    await builder.load(None)

    assert builder.active_view is View.EDIT
    assert builder.document.mode is PreviewMode.DERIVED
    assert builder.markdown == ""


@pytest.mark.asyncio
async def test_form_updates_reproject_and_collect_errors():
    builder = _builder()
    await builder.update_form(ResumeFormState(summary="Draft"))

    assert builder.markdown == "## Professional Summary\n\nDraft"
    assert "skills" in builder.errors

    await builder.update_form(_valid_state())
    assert builder.errors == {}
    assert '<div align="center">Jane Doe</div>' in builder.markdown


@pytest.mark.asyncio
async def test_override_is_kept_until_explicit_revert():
    builder = _builder()
    await builder.update_form(_valid_state())
    await builder.override_markdown("# Hand edited")
    await builder.update_form(ResumeFormState(summary="Changed"))

    snapshot = builder.snapshot()
    assert snapshot.markdown == "# Hand edited"
    assert snapshot.overrideWarning

    await builder.revert_to_form()
    assert builder.markdown == "## Professional Summary\n\nChanged"
    assert not builder.snapshot().overrideWarning


@pytest.mark.asyncio
async def test_invalid_form_blocks_save():
    saver = AsyncMock()
    builder = _builder(saver)
    await builder.update_form(ResumeFormState(summary="Only a summary"))

    result = await builder.save()

    assert not result.ok
    assert result.error == VALIDATION_BLOCKED_MESSAGE
    assert "contactInfo.email" in result.errors
    saver.assert_not_awaited()


@pytest.mark.asyncio
async def test_overridden_markdown_saves_without_form_validation():
    saver = AsyncMock(return_value={"id": "r1"})
    builder = _builder(saver)
    await builder.load("# Saved resume")
    await builder.override_markdown("# Edited again")

    result = await builder.save()

    assert result.ok
    saver.assert_awaited_once_with("# Edited again")


@pytest.mark.asyncio
async def test_valid_save_and_notifications_drain():
    builder = _builder()
    await builder.update_form(_valid_state())

    result = await builder.save()
    snapshot = builder.snapshot()

    assert result.ok
    assert snapshot.saveState is SaveState.SUCCESS
    assert [n.message for n in snapshot.notifications] == ["Resume saved successfully!"]
    assert builder.snapshot().notifications == []


@pytest.mark.asyncio
async def test_edit_view_page_lists_field_errors():
    builder = _builder()
    await builder.update_form(ResumeFormState())

    errors = builder.page.soup.select("li.field-error")
    assert {li["data-field"] for li in errors} >= {"contactInfo.email", "summary", "skills"}


def test_registry_reuses_builders_per_user():
    registry = BuilderRegistry()
    first = registry.get("user-1", "Jane")

    assert registry.get("user-1") is first
    assert registry.get("user-2") is not first

    registry.discard("user-1")
    assert registry.get("user-1") is not first


def test_registry_drops_idle_builders():
    now = [0.0]
    registry = BuilderRegistry(idle_seconds=60, clock=lambda: now[0])
    first = registry.get("user-1")
    registry.get("user-2")

    now[0] = 45.0
    registry.get("user-2")

    now[0] = 90.0
    registry.get("user-2")

    assert "user-1" not in registry
    assert "user-2" in registry
    assert registry.get("user-1") is not first


def test_registry_evicts_least_recently_used_past_cap():
    now = [0.0]
    registry = BuilderRegistry(max_sessions=2, clock=lambda: now[0])
    registry.get("user-1")
    registry.get("user-2")
    registry.get("user-1")
    registry.get("user-3")

    assert len(registry) == 2
    assert "user-1" in registry
    assert "user-2" not in registry
    assert "user-3" in registry
