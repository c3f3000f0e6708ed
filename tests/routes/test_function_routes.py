from datetime import datetime, timedelta, timezone
from unittest.mock import patch, AsyncMock

import httpx

from app.core.errors import UpstreamError
from app.models import Registration, PaymentStatus, TournamentStatus
from app.services.gemini_client import GeminiClient

ASSISTANT = "/api/v1/functions/tournament-ai-assistant"
CONFIRM = "/api/v1/functions/confirm-payment"
GENERATE = "app.services.assistant_function.GeminiClient.generate"


def pending_registration(db, tournament, profile):
    registration = Registration(
        tournament_id=tournament.id,
        user_id=profile.id,
        team_name="Alpha",
        team_members=["a", "b"],
        payment_status=PaymentStatus.PENDING,
        registered_at=datetime.now(timezone.utc),
    )
    db.add(registration)
    db.commit()
    db.refresh(registration)
    return registration


class TestAssistantActions:

    def test_list(self, client, make_tournament):
        make_tournament(title="Later", start_date=datetime.now(timezone.utc) + timedelta(days=9))
        make_tournament(title="Sooner", start_date=datetime.now(timezone.utc) + timedelta(days=1))

        response = client.post(ASSISTANT, json={"action": "list"})

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "tournament_list"
        assert [t["title"] for t in data["tournaments"]] == ["Sooner", "Later"]

    def test_legacy_action_name(self, client, make_tournament):
        make_tournament()

        response = client.post(ASSISTANT, json={"action": "get_tournaments"})

        assert response.json()["action"] == "tournament_list"

    def test_details(self, client, make_tournament):
        tournament = make_tournament(title="Erangel Showdown")

        response = client.post(ASSISTANT, json={"action": "details", "tournamentId": str(tournament.id)})

        data = response.json()
        assert data["action"] == "tournament_details"
        assert data["tournament"]["id"] == str(tournament.id)
        assert data["tournament"]["title"] == "Erangel Showdown"

    def test_details_without_id(self, client):
        response = client.post(ASSISTANT, json={"action": "details"})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid details request: tournament_id"}

    def test_unknown_action(self, client):
        response = client.post(ASSISTANT, json={"action": "cancel"})

        assert response.status_code == 400
        assert response.json() == {"error": "Unknown action: cancel"}

    def test_register_creates_pending_registration_with_upi(self, client, db, player, player_profile, make_tournament):
        _, headers = player
        tournament = make_tournament(entry_fee=50)

        response = client.post(
            ASSISTANT,
            json={
                "action": "register",
                "tournamentId": str(tournament.id),
                "userId": str(player_profile.id),
                "teamDetails": {"teamName": "Alpha", "teamMembers": ["p1", "p2"]},
            },
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "registration_created"
        assert data["upiString"].startswith("upi://pay?pa=")
        assert "am=50" in data["upiString"]
        assert data["paymentQR"].startswith("https://api.qrserver.com/")
        assert data["registration"]["payment_status"] == "pending"
        assert data["registration"]["team_members"] == ["p1", "p2"]

        registration = db.query(Registration).one()
        assert registration.payment_status == PaymentStatus.PENDING
        db.refresh(tournament)
        assert tournament.current_players == 0

    def test_register_for_full_tournament_fails_without_a_row(self, client, db, player, make_tournament):
        _, headers = player
        tournament = make_tournament(max_players=2, current_players=2)

        response = client.post(
            ASSISTANT, json={"action": "register", "tournamentId": str(tournament.id)}, headers=headers
        )

        assert response.status_code == 409
        assert response.json() == {"error": "Registration failed: Tournament is full"}
        assert db.query(Registration).count() == 0

    def test_register_twice(self, client, db, player, make_tournament):
        _, headers = player
        tournament = make_tournament()
        body = {"action": "register", "tournamentId": str(tournament.id)}

        client.post(ASSISTANT, json=body, headers=headers)
        response = client.post(ASSISTANT, json=body, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "Registration failed: Already registered for this tournament"
        assert db.query(Registration).count() == 1

    def test_register_requires_sign_in(self, client, make_tournament):
        tournament = make_tournament()

        response = client.post(ASSISTANT, json={"action": "register", "tournamentId": str(tournament.id)})

        assert response.status_code == 401
        assert "error" in response.json()


class TestAssistantChat:

    def test_chat_forwards_snapshot_of_upcoming(self, client, make_tournament):
        for day in range(6):
            make_tournament(title=f"Cup {day}", start_date=datetime.now(timezone.utc) + timedelta(days=day + 1))
        make_tournament(title="Live Cup", status=TournamentStatus.ACTIVE)

        with patch(GENERATE, new_callable=AsyncMock, return_value="Cup 0 starts first!") as generate:
            response = client.post(ASSISTANT, json={"message": "What's on?", "userId": None})

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Cup 0 starts first!"
        assert [t["title"] for t in data["tournaments"]] == [f"Cup {day}" for day in range(5)]
        assert "timestamp" in data

        system_prompt, message = generate.call_args.args
        assert message == "What's on?"
        assert "Cup 4" in system_prompt
        assert "Cup 5" not in system_prompt
        assert "Live Cup" not in system_prompt
        assert "Context: General tournament assistance" in system_prompt

    def test_chat_without_tournaments(self, client):
        with patch(GENERATE, new_callable=AsyncMock, return_value="No games yet") as generate:
            response = client.post(ASSISTANT, json={"message": "hi", "context": "Landing page"})

        assert response.json()["tournaments"] == []
        system_prompt, _ = generate.call_args.args
        assert "No upcoming tournaments available." in system_prompt
        assert "Context: Landing page" in system_prompt

    def test_upstream_failure(self, client):
        with patch(GENERATE, new_callable=AsyncMock, side_effect=UpstreamError()):
            response = client.post(ASSISTANT, json={"message": "hi"})

        assert response.status_code == 502
        assert response.json() == {"error": "AI request failed"}

    def test_malformed_upstream_answer(self, client):
        GeminiClient.transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        try:
            response = client.post(ASSISTANT, json={"message": "hi"})
        finally:
            GeminiClient.transport = None

        assert response.status_code == 502
        assert response.json() == {"error": "AI request failed"}

    def test_empty_message(self, client):
        response = client.post(ASSISTANT, json={"message": ""})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid chat request: message"}


class TestConfirmPayment:

    def test_confirms_and_takes_a_slot(self, client, db, player, player_profile, make_tournament):
        _, headers = player
        tournament = make_tournament(max_players=4)
        registration = pending_registration(db, tournament, player_profile)

        response = client.post(
            CONFIRM,
            json={
                "registrationId": str(registration.id),
                "tournamentId": str(tournament.id),
                "paymentProof": "UTR123456",
            },
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["registration"]["payment_status"] == "completed"
        assert data["tournament"]["current_players"] == 1

    def test_missing_ids(self, client, player):
        _, headers = player

        response = client.post(CONFIRM, json={"paymentProof": "x"}, headers=headers)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Registration ID and Tournament ID are required"}

    def test_full_tournament(self, client, db, player, player_profile, make_tournament):
        _, headers = player
        tournament = make_tournament(max_players=2, current_players=2)
        registration = pending_registration(db, tournament, player_profile)

        response = client.post(
            CONFIRM,
            json={"registrationId": str(registration.id), "tournamentId": str(tournament.id)},
            headers=headers,
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "Tournament is full"}
        db.refresh(registration)
        assert registration.payment_status == PaymentStatus.PENDING

    def test_second_confirmation_is_rejected(self, client, db, player, player_profile, make_tournament):
        _, headers = player
        tournament = make_tournament(max_players=4)
        registration = pending_registration(db, tournament, player_profile)
        body = {"registrationId": str(registration.id), "tournamentId": str(tournament.id)}

        client.post(CONFIRM, json=body, headers=headers)
        response = client.post(CONFIRM, json=body, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "Registration is not pending"
        db.refresh(tournament)
        assert tournament.current_players == 1

    def test_other_users_registration(self, client, db, organizer, player_profile, make_tournament):
        _, organizer_headers = organizer
        tournament = make_tournament()
        registration = pending_registration(db, tournament, player_profile)

        response = client.post(
            CONFIRM,
            json={"registrationId": str(registration.id), "tournamentId": str(tournament.id)},
            headers=organizer_headers,
        )

        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_unknown_registration(self, client, player, make_tournament):
        _, headers = player
        tournament = make_tournament()

        response = client.post(
            CONFIRM,
            json={"registrationId": "8a7b6c5d-0000-4000-8000-000000000000", "tournamentId": str(tournament.id)},
            headers=headers,
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Registration not found"}
