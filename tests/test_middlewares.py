"""Tests for the session gate, log context and admin access middlewares."""

import asyncio

import structlog
from aiogram.types import User

from portal.config import settings
from portal.middlewares.access import AdminAccessMiddleware
from portal.middlewares.auth import AuthMiddleware, LoggingMiddleware, resolve_identity


def run(coro):
    return asyncio.run(coro)


def make_user(user_id=1001, is_bot=False):
    return User(id=user_id, is_bot=is_bot, first_name="Jamie", last_name="Rivera", username="jrivera")


async def handler(event, data):
    return data


class TestResolveIdentity:
    def test_user(self):
        identity = resolve_identity(make_user())

        assert identity.uid == "1001"
        assert identity.display_name == "Jamie Rivera"
        assert identity.username == "jrivera"

    def test_anonymous_and_bots(self):
        assert resolve_identity(None) is None
        assert resolve_identity(make_user(is_bot=True)) is None


class TestAuthMiddleware:
    def test_attaches_identity(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_IDS", "42")
        data = run(AuthMiddleware()(handler, object(), {"event_from_user": make_user()}))

        assert data["identity"].uid == "1001"
        assert data["is_admin"] is False

    def test_admin_flag(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_IDS", "42, 1001")
        data = run(AuthMiddleware()(handler, object(), {"event_from_user": make_user()}))
        assert data["is_admin"] is True

    def test_no_user(self):
        data = run(AuthMiddleware()(handler, object(), {}))

        assert data["identity"] is None
        assert data["is_admin"] is False


class TestAdminAccessMiddleware:
    def test_admin_passes(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_IDS", "1001")
        data = {"event_from_user": make_user()}
        assert run(AdminAccessMiddleware()(handler, object(), data)) is data

    def test_non_admin_is_blocked(self, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_IDS", "42")
        calls = []

        async def tracking_handler(event, data):
            calls.append(event)

        result = run(AdminAccessMiddleware()(tracking_handler, object(), {"event_from_user": make_user()}))

        assert result is None
        assert calls == []


class TestLoggingMiddleware:
    def test_binds_update_context(self):
        async def context_handler(event, data):
            return structlog.contextvars.get_contextvars()

        context = run(LoggingMiddleware()(context_handler, object(), {"event_from_user": make_user()}))

        assert context == {"user_id": 1001, "update_type": "object"}

    def test_previous_context_is_cleared(self):
        async def context_handler(event, data):
            return structlog.contextvars.get_contextvars()

        async def two_updates():
            middleware = LoggingMiddleware()
            await middleware(context_handler, object(), {"event_from_user": make_user()})
            return await middleware(context_handler, object(), {})

        assert run(two_updates()) == {"user_id": None, "update_type": "object"}
