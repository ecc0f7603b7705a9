"""
End-to-end tests for the quiz endpoints through the ASGI app.
"""
from datetime import timedelta

import httpx

from quizhub.main import app
from quizhub.models.attempt import Attempt
from quizhub.models.attempt_model import AttemptModel
from quizhub.routers import quizzes as quizzes_router
from quizhub.utils.time_utils import utcnow

from conftest import auth_headers, quiz_payload


def _json_payload(start, end, year_of_study=2) -> dict:
    payload = quiz_payload(start, end, year_of_study)
    payload["startTime"] = start.isoformat()
    payload["endTime"] = end.isoformat()
    return payload


class TestAuthorization:
    async def test_missing_token(self, client):
        response = await client.get("/api/quizzes")
        assert response.status_code == 401
        assert response.json() == {"message": "Not authorized to access this route"}

    async def test_invalid_token(self, client):
        response = await client.get("/api/quizzes", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401

    async def test_student_cannot_create_quiz(self, client, make_user, open_window):
        student = await make_user("student", year_of_study=2)
        response = await client.post(
            "/api/quizzes", json=_json_payload(*open_window), headers=auth_headers(student)
        )
        assert response.status_code == 403
        assert "not authorized" in response.json()["message"]


class TestQuizLifecycle:
    async def test_create_returns_summary(self, client, make_user):
        instructor = await make_user("instructor")
        start = utcnow() + timedelta(days=1)

        response = await client.post(
            "/api/quizzes",
            json=_json_payload(start, start + timedelta(hours=1)),
            headers=auth_headers(instructor),
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"quizId", "title", "yearOfStudy", "startTime", "endTime"}
        assert body["yearOfStudy"] == 2

    async def test_create_rejects_inverted_window(self, client, make_user):
        instructor = await make_user("instructor")
        start = utcnow() + timedelta(days=1)

        response = await client.post(
            "/api/quizzes",
            json=_json_payload(start, start - timedelta(hours=1)),
            headers=auth_headers(instructor),
        )

        assert response.status_code == 400
        assert response.json() == {"message": "End time must be after start time"}

    async def test_create_rejects_malformed_body(self, client, make_user):
        instructor = await make_user("instructor")
        response = await client.post(
            "/api/quizzes", json={"title": "x"}, headers=auth_headers(instructor)
        )
        assert response.status_code == 400
        assert "yearOfStudy" in response.json()["message"]

    async def test_update_and_delete_before_start(self, client, make_user, make_quiz):
        instructor = await make_user("instructor")
        start = utcnow() + timedelta(days=1)
        quiz = await make_quiz(instructor, start, start + timedelta(hours=1))
        payload = _json_payload(start, start + timedelta(hours=2))
        payload["title"] = "Renamed"

        updated = await client.put(f"/api/quizzes/{quiz['id']}", json=payload, headers=auth_headers(instructor))
        assert updated.status_code == 200
        assert updated.json()["title"] == "Renamed"

        deleted = await client.delete(f"/api/quizzes/{quiz['id']}", headers=auth_headers(instructor))
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Quiz deleted"}

    async def test_started_quiz_is_immutable(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        quiz = await make_quiz(instructor, *open_window)

        updated = await client.put(
            f"/api/quizzes/{quiz['id']}", json=_json_payload(*open_window), headers=auth_headers(instructor)
        )
        deleted = await client.delete(f"/api/quizzes/{quiz['id']}", headers=auth_headers(instructor))

        assert updated.status_code == 400
        assert deleted.status_code == 400
        assert deleted.json() == {"message": "Cannot delete quiz after start time"}

    async def test_only_owner_may_update(self, client, make_user, make_quiz):
        owner = await make_user("instructor")
        other = await make_user("instructor")
        start = utcnow() + timedelta(days=1)
        quiz = await make_quiz(owner, start, start + timedelta(hours=1))

        response = await client.delete(f"/api/quizzes/{quiz['id']}", headers=auth_headers(other))

        assert response.status_code == 403

    async def test_edit_view_includes_answer_key(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        quiz = await make_quiz(instructor, *open_window)

        response = await client.get(f"/api/quizzes/{quiz['id']}/edit", headers=auth_headers(instructor))

        assert response.status_code == 200
        assert response.json()["questions"][0]["options"][0]["isCorrect"] is True


class TestStudentFlow:
    async def test_quiz_details_hide_correct_answers(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)

        response = await client.get(f"/api/quizzes/{quiz['id']}", headers=auth_headers(student))

        assert response.status_code == 200
        question = response.json()["questions"][0]
        assert "correctOptionIds" not in question
        assert all(set(o) == {"optionId", "text"} for o in question["options"])

    async def test_quiz_details_other_cohort(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=3)
        quiz = await make_quiz(instructor, *open_window)

        response = await client.get(f"/api/quizzes/{quiz['id']}", headers=auth_headers(student))

        assert response.status_code == 403

    async def test_quiz_details_require_profile(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student")
        quiz = await make_quiz(instructor, *open_window)

        response = await client.get(f"/api/quizzes/{quiz['id']}", headers=auth_headers(student))

        assert response.status_code == 404
        assert response.json() == {"message": "Profile not found"}

    async def test_assigned_quizzes_by_status(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        await make_quiz(instructor, *open_window)
        later = utcnow() + timedelta(days=1)
        await make_quiz(instructor, later, later + timedelta(hours=1))
        await make_quiz(instructor, *open_window, year_of_study=4)

        active = await client.get("/api/quizzes", headers=auth_headers(student))
        upcoming = await client.get("/api/quizzes?status=upcoming", headers=auth_headers(student))
        bogus = await client.get("/api/quizzes?status=someday", headers=auth_headers(student))

        assert len(active.json()) == 1
        assert len(upcoming.json()) == 1
        assert bogus.status_code == 400

    async def test_attempt_then_duplicate(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)
        body = {"answers": [{"questionId": "q1", "selectedOptionIds": ["A"]}]}

        first = await client.post(f"/api/quizzes/{quiz['id']}/attempt", json=body, headers=auth_headers(student))
        second = await client.post(f"/api/quizzes/{quiz['id']}/attempt", json=body, headers=auth_headers(student))

        assert first.status_code == 201
        assert first.json()["totalScore"] == 10
        assert first.json()["isScored"] is True
        assert second.status_code == 403
        assert second.json() == {"message": "Quiz already attempted"}

    async def test_attempt_requires_answers(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)

        response = await client.post(f"/api/quizzes/{quiz['id']}/attempt", json={}, headers=auth_headers(student))

        assert response.status_code == 400

    async def test_results_hidden_while_open(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)

        await client.post(
            f"/api/quizzes/{quiz['id']}/attempt",
            json={"answers": [{"questionId": "q1", "selectedOptionIds": ["A"]}]},
            headers=auth_headers(student),
        )
        response = await client.get(f"/api/quizzes/{quiz['id']}/results", headers=auth_headers(student))

        assert response.status_code == 403
        assert response.json() == {"message": "Results not available until quiz ends"}

    async def test_results_after_window(self, client, make_user, make_quiz):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        end = utcnow() - timedelta(minutes=5)
        quiz = await make_quiz(instructor, end - timedelta(hours=1), end)
        await AttemptModel.create(Attempt(
            quizId=quiz["id"], userId=student["id"], startTime=end, endTime=end, isScored=True,
            answers=[{"questionId": "q1", "selectedOptionIds": ["A"], "isCorrect": True, "scoreAwarded": 10}],
            totalScore=10,
        ))

        response = await client.get(f"/api/quizzes/{quiz['id']}/results", headers=auth_headers(student))

        assert response.status_code == 200
        body = response.json()
        assert body["attempt"]["totalScore"] == 10
        assert body["quiz"]["questions"][0]["correctOptionIds"] == ["A"]

    async def test_attempt_after_window(self, client, make_user, make_quiz):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        end = utcnow() - timedelta(minutes=5)
        quiz = await make_quiz(instructor, end - timedelta(hours=1), end)

        response = await client.post(
            f"/api/quizzes/{quiz['id']}/attempt", json={"answers": []}, headers=auth_headers(student)
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Quiz is not available"}


class TestInstructorViews:
    async def test_statistics_refresh(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)
        url = f"/api/quizzes/{quiz['id']}/statistics"

        empty = await client.get(url, headers=auth_headers(instructor))
        await client.post(
            f"/api/quizzes/{quiz['id']}/attempt",
            json={"answers": [{"questionId": "q1", "selectedOptionIds": ["A"]}]},
            headers=auth_headers(student),
        )
        cached = await client.get(url, headers=auth_headers(instructor))
        cached_again = await client.get(url, headers=auth_headers(instructor))
        refreshed = await client.get(f"{url}?refresh=true", headers=auth_headers(instructor))

        assert empty.json()["totalAttempts"] == 0
        assert cached.json()["totalAttempts"] == 0
        assert cached.content == cached_again.content
        assert refreshed.json()["totalAttempts"] == 1
        assert refreshed.json()["averageScore"] == 10
        assert refreshed.json()["attemptsByYear"] == [{"yearOfStudy": 2, "count": 1}]

    async def test_statistics_invalid_id(self, client, make_user):
        instructor = await make_user("instructor")
        response = await client.get("/api/quizzes/nope/statistics", headers=auth_headers(instructor))
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid quiz ID"}

    async def test_results_for_instructor(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        anonymous = await make_user("student")
        quiz = await make_quiz(instructor, *open_window)
        for user in (student, anonymous):
            await client.post(
                f"/api/quizzes/{quiz['id']}/attempt",
                json={"answers": [{"questionId": "q2", "selectedOptionIds": ["A", "B"]}]},
                headers=auth_headers(user),
            )

        response = await client.get(f"/api/quizzes/{quiz['id']}/resultsForInstructor", headers=auth_headers(instructor))

        rows = response.json()
        assert [r["score"] for r in rows] == [5, 5]
        assert rows[0]["studentName"].startswith("Student")
        assert rows[1]["usn"] == "N/A"
        assert rows[1]["yearOfStudy"] == "N/A"

    async def test_instructor_quizzes_count_attempts(self, client, make_user, make_quiz, open_window):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)
        await client.post(
            f"/api/quizzes/{quiz['id']}/attempt", json={"answers": []}, headers=auth_headers(student)
        )

        response = await client.get("/api/instructors/quizzes", headers=auth_headers(instructor))

        assert response.status_code == 200
        assert response.json()[0]["totalAttempts"] == 1


class TestUnexpectedErrors:
    async def test_unexpected_error_uses_message_envelope(self, database, make_user, make_quiz, open_window, monkeypatch):
        instructor = await make_user("instructor")
        student = await make_user("student", year_of_study=2)
        quiz = await make_quiz(instructor, *open_window)

        async def broken(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(quizzes_router.attempt_service, "submit_attempt", broken)
        monkeypatch.setattr(quizzes_router.statistics_service, "get_statistics", broken)

        # the 500 handler responds and the error is still re-raised to the server
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            attempt = await client.post(
                f"/api/quizzes/{quiz['id']}/attempt",
                json={"answers": [{"questionId": "q1", "selectedOptionIds": ["A"]}]},
                headers=auth_headers(student),
            )
            statistics = await client.get(f"/api/quizzes/{quiz['id']}/statistics", headers=auth_headers(instructor))

        assert attempt.status_code == 500
        assert attempt.json() == {"message": "Internal server error"}
        assert statistics.status_code == 500
        assert statistics.json() == {"message": "Internal server error"}
