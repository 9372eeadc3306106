"""Tests for API Endpoints."""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from clinical_engine.api.deps import get_outcome_service
from clinical_engine.main import app
from clinical_engine.models import Assessment, OutcomeAssessment, Protocol, ProtocolPhase, User


@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
class TestUserAPI:
    """Tests for User endpoints."""

    async def test_create_user(self, client: AsyncClient):
        response = await client.post("/api/v1/users", json={"email": "newuser@example.com"})
        assert response.status_code == 201
        assert response.json()["email"] == "newuser@example.com"

    async def test_create_user_duplicate_email(self, client: AsyncClient, test_user: User):
        response = await client.post("/api/v1/users", json={"email": test_user.email})
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    async def test_get_user(self, client: AsyncClient, test_user: User):
        response = await client.get(f"/api/v1/users/{test_user.id}")
        assert response.status_code == 200
        assert response.json()["email"] == test_user.email

    async def test_get_current_user(self, client: AsyncClient, test_user: User):
        response = await client.get("/api/v1/users/me", params={"user_id": test_user.id})
        assert response.status_code == 200
        assert response.json()["id"] == test_user.id

    async def test_create_user_with_profile(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/users",
            json={"email": "Jane@Example.com", "first_name": "Jane", "medical_conditions": ["osteoporosis"]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "jane@example.com"
        assert data["medical_conditions"] == ["osteoporosis"]
        assert data["preferred_language"] == "en"

    async def test_update_profile_keeps_unsent_fields(self, client: AsyncClient, test_user: User):
        params = {"user_id": test_user.id}
        await client.patch("/api/v1/users/me", params=params, json={"first_name": "Sam", "preferred_language": "es"})
        response = await client.patch("/api/v1/users/me", params=params, json={"last_name": "Lee"})
        assert response.status_code == 200
        data = response.json()
        assert data["first_name"] == "Sam"
        assert data["last_name"] == "Lee"
        assert data["preferred_language"] == "es"

    async def test_get_missing_user(self, client: AsyncClient):
        response = await client.get("/api/v1/users/999")
        assert response.status_code == 404


@pytest.mark.asyncio
class TestExerciseAPI:
    """Tests for Exercise endpoints."""

    async def test_catalog(self, client: AsyncClient):
        response = await client.get("/api/v1/exercises/catalog")
        assert response.status_code == 200
        assert response.json()["total"] == 22

    async def test_catalog_filtered_by_alias(self, client: AsyncClient):
        response = await client.get("/api/v1/exercises/catalog", params={"body_part": "cervical"})
        data = response.json()
        assert 0 < data["total"] < 22
        assert all("neck" in e["body_parts"] for e in data["exercises"])

    async def test_match_returns_full_ranked_catalog(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/exercises/match",
            json={"body_part": "lower back", "pain_level": 6, "pain_type": "aching/stiffness"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 22

        scores = [r["score"] for r in data["results"]]
        assert scores == sorted(scores, reverse=True)
        for r in data["results"]:
            b = r["breakdown"]
            assert r["score"] == b["total"]
            assert b["body_part"] + b["pain_type"] + b["difficulty"] + b["safety"] + b["symptoms"] == b["total"]

    async def test_match_safe_only_with_limit(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/exercises/match",
            params={"safe_only": True, "limit": 3},
            json={"body_part": "shoulder", "pain_level": 8},
        )
        data = response.json()
        assert data["total"] <= 3
        assert all(r["exercise"]["max_pain_level"] >= 8 for r in data["results"])

    async def test_match_rejects_out_of_range_pain(self, client: AsyncClient):
        response = await client.post("/api/v1/exercises/match", json={"pain_level": 11})
        assert response.status_code == 422

    async def test_recommendations(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/exercises/recommendations",
            json={"body_part": "neck", "pain_level": 4, "pain_type": "stiffness"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["risk_level"] == "low"
        assert 1 <= len(data["recommendations"]) <= 5
        assert data["recommendations"][0]["dosage"]["sets"] >= 1

    async def test_recommendations_with_red_flags(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/exercises/recommendations",
            json={"body_part": "lower back", "pain_level": 5, "red_flags": ["Loss of bladder control"]},
        )
        data = response.json()
        assert data["risk_level"] == "critical"
        assert data["recommendations"] == []


@pytest.mark.asyncio
class TestProtocolAPI:
    """Tests for Protocol endpoints."""

    async def test_no_assignment(self, client: AsyncClient, test_user: User):
        response = await client.get("/api/v1/protocols/current", params={"user_id": test_user.id})
        assert response.status_code == 200
        data = response.json()
        assert data["has_assignment"] is False
        assert data["exercises"] == []

    async def test_current_protocol_with_synthesized_phase(self, client: AsyncClient, db_session, test_user: User):
        protocol = Protocol(protocol_key="shoulder_rotator_cuff_repair", region="shoulder", name="Rotator Cuff Repair")
        db_session.add(protocol)
        await db_session.flush()
        db_session.add(ProtocolPhase(protocol_id=protocol.id, phase_number=1, name="Protection"))
        db_session.add(Assessment(user_id=test_user.id, protocol_key_selected="shoulder_rotator_cuff_repair",
                                  phase_number_selected=4))
        await db_session.commit()

        response = await client.get("/api/v1/protocols/current", params={"user_id": test_user.id})
        data = response.json()
        assert data["has_assignment"] is True
        assert data["phase_info"]["phase_name"] == "Phase 4"
        assert data["phase_info"]["phase_defined"] is False

    async def test_unknown_user_is_unauthorized(self, client: AsyncClient):
        response = await client.get("/api/v1/protocols/current", params={"user_id": 999})
        assert response.status_code == 401

    async def test_phase_exercises_empty(self, client: AsyncClient):
        response = await client.get("/api/v1/protocols/lumbar_fusion/phases/1/exercises")
        assert response.status_code == 200
        data = response.json()
        assert data["exercises"] == []
        assert data["routine_id"] is None
        assert data["source"] == "none"


@pytest.mark.asyncio
class TestOutcomeAPI:
    """Tests for Outcome endpoints."""

    async def test_record_outcome(self, client: AsyncClient, test_user: User):
        response = await client.post(
            "/api/v1/outcomes",
            params={"user_id": test_user.id},
            json={"questionnaire_key": "odi", "pain_location": "Lower back",
                  "context_type": "baseline", "responses": [2] * 10},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["condition_tag"] == "back"
        assert data["normalized_score"] == 40.0

    async def test_unknown_questionnaire_is_bad_request(self, client: AsyncClient, test_user: User):
        response = await client.post(
            "/api/v1/outcomes",
            params={"user_id": test_user.id},
            json={"questionnaire_key": "sf36", "condition_tag": "back", "responses": [1]},
        )
        assert response.status_code == 400
        assert "Unknown questionnaire type" in response.json()["detail"]

    async def test_summary(self, client: AsyncClient, db_session, test_user: User):
        now = datetime.utcnow()
        db_session.add_all([
            OutcomeAssessment(user_id=test_user.id, questionnaire_key="odi", condition_tag="back",
                              normalized_score=40, created_at=now - timedelta(days=30)),
            OutcomeAssessment(user_id=test_user.id, questionnaire_key="odi", condition_tag="back",
                              normalized_score=28, created_at=now - timedelta(days=20)),
        ])
        await db_session.commit()

        response = await client.get("/api/v1/outcomes/summary/back", params={"user_id": test_user.id})
        assert response.status_code == 200
        data = response.json()
        assert data["change"]["function_change"] == -12
        assert data["change"]["function_improvement"] == "improved"
        assert data["change"]["is_meaningful"] is True
        assert data["needs_follow_up"] is True

        response = await client.get("/api/v1/outcomes/summaries", params={"user_id": test_user.id})
        assert response.json()["total"] == 1

    async def test_summary_tag_is_case_insensitive(self, client: AsyncClient, db_session, test_user: User):
        db_session.add(OutcomeAssessment(user_id=test_user.id, questionnaire_key="odi", condition_tag="back",
                                         normalized_score=40, created_at=datetime.utcnow() - timedelta(days=3)))
        await db_session.commit()

        response = await client.get("/api/v1/outcomes/summary/Back", params={"user_id": test_user.id})
        data = response.json()
        assert data["condition_tag"] == "back"
        assert data["assessment_count"] == 1

    async def test_empty_summary(self, client: AsyncClient, test_user: User):
        response = await client.get("/api/v1/outcomes/summary/knee", params={"user_id": test_user.id})
        data = response.json()
        assert data["assessment_count"] == 0
        assert data["change"] is None

    async def test_follow_up(self, client: AsyncClient, test_user: User):
        response = await client.get("/api/v1/outcomes/follow-up/knee", params={"user_id": test_user.id})
        data = response.json()
        assert data["needs_follow_up"] is True
        assert data["recommended_questionnaire"] == "koos"

    async def test_overdue(self, client: AsyncClient, db_session, test_user: User):
        db_session.add(OutcomeAssessment(user_id=test_user.id, questionnaire_key="koos", condition_tag="knee",
                                         normalized_score=60, created_at=datetime.utcnow() - timedelta(days=21)))
        await db_session.commit()

        response = await client.get("/api/v1/outcomes/overdue")
        data = response.json()
        assert [o["condition_tag"] for o in data] == ["knee"]
        assert data[0]["days_since"] == 21

    async def test_storage_failure_is_service_unavailable(self, client: AsyncClient, test_user: User):
        class FailingService:
            async def get_summary(self, user_id, condition_tag):
                raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        app.dependency_overrides[get_outcome_service] = lambda: FailingService()
        response = await client.get("/api/v1/outcomes/summary/back", params={"user_id": test_user.id})
        assert response.status_code == 503
        assert "retry" in response.json()["detail"]
