"""Tests for accounts, sessions and auth-state events."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from backend_client import AuthEvent
from errors import AuthError


@pytest.mark.asyncio
async def test_sign_up_creates_user_and_profile(backend):
    session = await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice Donor")

    profile = await backend.select_one("profiles", {"id": session.user_id})
    assert profile["full_name"] == "Alice Donor"
    assert profile["email"] == "alice@example.com"
    assert profile["phone"] is None

    user = await backend.select_one("users", {"id": session.user_id})
    assert user["password"] != "s3cret-pass"


@pytest.mark.asyncio
async def test_sign_up_rejects_duplicate_email(backend):
    await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")
    with pytest.raises(AuthError, match="already exists"):
        await backend.auth.sign_up("alice@example.com", "other-pass", "Alice Again")


@pytest.mark.asyncio
async def test_sign_in_with_wrong_password(backend):
    await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")
    with pytest.raises(AuthError):
        await backend.auth.sign_in_with_password("alice@example.com", "wrong")
    with pytest.raises(AuthError):
        await backend.auth.sign_in_with_password("nobody@example.com", "s3cret-pass")


@pytest.mark.asyncio
async def test_get_session_round_trip_and_sign_out(backend):
    session = await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")

    resolved = await backend.auth.get_session(session.access_token)
    assert resolved.user_id == session.user_id
    assert resolved.email == "alice@example.com"

    await backend.auth.sign_out(session)
    assert await backend.auth.get_session(session.access_token) is None


@pytest.mark.asyncio
async def test_get_session_without_valid_token(backend):
    assert await backend.auth.get_session(None) is None
    assert await backend.auth.get_session("") is None
    assert await backend.auth.get_session("not.a.token") is None


@pytest.mark.asyncio
async def test_auth_events_reach_subscribers(backend):
    handler = MagicMock()
    async_handler = AsyncMock()
    backend.auth.on_auth_state_change(handler)
    backend.auth.on_auth_state_change(async_handler)

    session = await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")
    handler.assert_called_once_with(AuthEvent.SIGNED_IN, session)
    async_handler.assert_awaited_once_with(AuthEvent.SIGNED_IN, session)

    await backend.auth.sign_out(session)
    handler.assert_called_with(AuthEvent.SIGNED_OUT, session)
    assert async_handler.await_count == 2


@pytest.mark.asyncio
async def test_unsubscribe_stops_events(backend):
    handler = MagicMock()
    subscription = backend.auth.on_auth_state_change(handler)
    assert subscription.active

    subscription.unsubscribe()
    subscription.unsubscribe()
    assert not subscription.active

    await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")
    handler.assert_not_called()


@pytest.mark.asyncio
async def test_failing_handler_does_not_break_sign_in(backend):
    backend.auth.on_auth_state_change(MagicMock(side_effect=RuntimeError("listener bug")))
    later = MagicMock()
    backend.auth.on_auth_state_change(later)

    session = await backend.auth.sign_up("alice@example.com", "s3cret-pass", "Alice")
    assert session.access_token
    later.assert_called_once()
