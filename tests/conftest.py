import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401
from app.core.database import Base, engine, SessionLocal, get_db
from app.main import app as fastapi_app
from app.models import Tournament, TournamentStatus, TournamentType


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


def sign_up(client, username, user_type="team", organizer_code=None):
    body = {
        "email": f"{username}@example.com",
        "password": "secret123",
        "username": username,
        "in_game_name": username.upper(),
        "user_type": user_type,
    }
    if organizer_code:
        body["organizer_code"] = organizer_code

    response = client.post("/api/v1/auth/sign-up", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def organizer(client):
    """Organizer account: (tokens, headers)"""
    tokens = sign_up(client, "organizer1", user_type="organizer")
    return tokens, auth_headers(tokens)


@pytest.fixture
def player(client):
    """Team account: (tokens, headers)"""
    tokens = sign_up(client, "player1")
    return tokens, auth_headers(tokens)


@pytest.fixture
def organizer_profile(db, organizer):
    from app.models import Profile
    return db.query(Profile).filter(Profile.username == "organizer1").one()


@pytest.fixture
def player_profile(db, player):
    from app.models import Profile
    return db.query(Profile).filter(Profile.username == "player1").one()


@pytest.fixture
def make_tournament(db, organizer_profile):
    def _make(**overrides):
        fields = {
            "title": "Erangel Showdown",
            "description": "Squad battle on Erangel",
            "entry_fee": 50,
            "prize_pool": 1000,
            "max_players": 4,
            "current_players": 0,
            "tournament_type": TournamentType.SQUAD,
            "map": "Erangel",
            "start_date": datetime.now(timezone.utc) + timedelta(days=3),
            "status": TournamentStatus.UPCOMING,
            "organizer_id": organizer_profile.id,
        }
        fields.update(overrides)
        tournament = Tournament(**fields)
        db.add(tournament)
        db.commit()
        db.refresh(tournament)
        return tournament

    return _make
