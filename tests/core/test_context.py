from types import SimpleNamespace

import pytest

from app.core.context import AuthEvent, AuthEventBus, SessionContext
from app.core.errors import AuthenticationRequired, AccessDenied
from app.core.security import create_access_token
from app.models.users import UserType


class TestAuthEventBus:

    def test_subscribe_and_unsubscribe(self):
        bus = AuthEventBus()
        received = []
        unsubscribe = bus.subscribe(lambda event, session: received.append((event, session)))

        bus.publish(AuthEvent.SIGNED_IN, "session-1")
        unsubscribe()
        bus.publish(AuthEvent.SIGNED_OUT, "session-1")

        assert received == [(AuthEvent.SIGNED_IN, "session-1")]

    def test_failing_listener_does_not_stop_others(self):
        bus = AuthEventBus()
        received = []

        def broken(event, session):
            raise RuntimeError("listener bug")

        bus.subscribe(broken)
        bus.subscribe(lambda event, session: received.append(event))

        bus.publish(AuthEvent.USER_UPDATED, None)
        assert received == [AuthEvent.USER_UPDATED]


class TestSessionContext:

    def test_anonymous_by_default(self):
        ctx = SessionContext(db=None)
        assert not ctx.is_authenticated
        assert ctx.user_id is None

        with pytest.raises(AuthenticationRequired) as exc:
            ctx.require_user("Please sign in to join tournaments")
        assert exc.value.detail == "Please sign in to join tournaments"

    def test_apply_and_teardown(self):
        profile = SimpleNamespace(user_type=UserType.TEAM, is_organizer=False)
        user = SimpleNamespace(id="user-1", profile=profile)
        session = SimpleNamespace(user=user)

        ctx = SessionContext(db=None)
        ctx.apply(AuthEvent.SIGNED_IN, session)
        assert ctx.is_authenticated
        assert ctx.require_user() is profile

        ctx.apply(AuthEvent.SIGNED_OUT, session)
        assert not ctx.is_authenticated
        assert ctx.session is None

    def test_team_player_is_not_an_organizer(self):
        profile = SimpleNamespace(is_organizer=False)
        ctx = SessionContext(db=None, user=SimpleNamespace(id="u"), profile=profile)

        with pytest.raises(AccessDenied) as exc:
            ctx.require_organizer()
        assert "Only tournament organizers" in exc.value.detail

    def test_initialize_ignores_refresh_tokens(self, db):
        from app.core.security import create_refresh_token

        ctx = SessionContext(db).initialize(create_refresh_token({"sub": "x", "sid": "y"}))
        assert not ctx.is_authenticated

    def test_initialize_ignores_unknown_session(self, db):
        token = create_access_token({
            "sub": "8a7b6c5d-0000-4000-8000-000000000000",
            "sid": "8a7b6c5d-0000-4000-8000-000000000001",
        })
        ctx = SessionContext(db).initialize(token)
        assert not ctx.is_authenticated

    def test_initialize_ignores_garbage(self, db):
        assert not SessionContext(db).initialize("not-a-jwt").is_authenticated
