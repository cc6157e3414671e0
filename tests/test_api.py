"""
API tests through FastAPI's TestClient
"""
import inspect

from fastapi.routing import APIRoute

from quizgo import state
from quizgo.api import answer_sheets
from quizgo.errors import QuestionImportError
from quizgo.main import app
from quizgo.services.question_import import QuestionImportClient, clean_questions


QUIZ = {
    "id": "friday",
    "title": "Friday Night Quiz",
    "teams": ["Owls", "Foxes", "Bears"],
    "rounds": [
        {
            "roundNumber": 1,
            "ruleset": "multiple-choice",
            "pointsPerCorrectAnswer": 2,
            "questions": [
                {"number": 1, "text": "Capital of Italy?", "options": ["Rome", "Milan", "Turin", "Naples"], "correctAnswer": "A"},
                {"number": 2, "text": "Largest planet?", "options": ["Mars", "Jupiter", "Venus", "Earth"], "correctAnswer": "B"},
            ],
        },
        {
            "roundNumber": 2,
            "ruleset": "number",
            "questions": [{"number": 1, "text": "Year of Hastings?", "correctAnswer": 1066}],
        },
        {
            "roundNumber": 3,
            "ruleset": "free-text",
            "questions": [{"number": 1, "text": "Capital of Russia?", "correctAnswer": {"bg": "Москва", "en": "Moscow"}}],
        },
    ],
}


def submit(client, team, round_number, answers):
    response = client.post(
        "/api/submissions",
        json={
            "quizId": "friday",
            "teamName": team,
            "roundNumber": round_number,
            "answers": [{"number": n, "answer": a} for n, a in answers.items()],
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


def test_health(client):
    body = client.get("/").json()
    assert body["status"] == "ok"
    assert body["store_ready"] is True
    assert body["ocr_configured"] is False
    assert body["question_import_configured"] is False


def test_quiz_crud(client):
    response = client.post("/api/quizzes", json=QUIZ)
    assert response.status_code == 201
    assert response.json() == {"id": "friday"}

    quiz = client.get("/api/quizzes/friday").json()
    assert quiz["title"] == "Friday Night Quiz"
    assert quiz["data"]["teams"] == ["Owls", "Foxes", "Bears"]
    assert quiz["data"]["rounds"][1]["pointsExactMatch"] == 3
    assert quiz["data"]["rounds"][2]["questions"][0]["correctAnswer"] == {"bg": "Москва", "en": "Moscow"}

    listing = client.get("/api/quizzes").json()
    assert [q["id"] for q in listing] == ["friday"]

    assert client.get("/api/quizzes/missing").status_code == 404


def test_quiz_without_id_gets_generated_id(client):
    response = client.post("/api/quizzes", json={"title": "Untitled", "rounds": []})
    assert response.status_code == 201
    assert response.json()["id"].startswith("quiz_")


def test_quiz_validation_error(client):
    response = client.post("/api/quizzes", json={"rounds": [{"roundNumber": 1, "ruleset": "essay"}]})
    assert response.status_code == 422


def test_delete_round_and_question(client):
    client.post("/api/quizzes", json=QUIZ)
    response = client.delete("/api/quizzes/friday/rounds/1/questions/2")
    assert response.json() == {"ok": True, "removed": True}
    response = client.delete("/api/quizzes/friday/rounds/3")
    assert response.json() == {"ok": True, "removed": True}
    response = client.delete("/api/quizzes/friday/rounds/3")
    assert response.json() == {"ok": True, "removed": False}

    rounds = client.get("/api/quizzes/friday").json()["data"]["rounds"]
    assert [r["roundNumber"] for r in rounds] == [1, 2]
    assert len(rounds[0]["questions"]) == 1

    assert client.delete("/api/quizzes/missing/rounds/1").status_code == 404


def test_switch_ruleset(client):
    client.post("/api/quizzes", json=QUIZ)
    response = client.put("/api/quizzes/friday/rounds/2/ruleset", json={"ruleset": "free-text"})
    assert response.status_code == 200
    body = response.json()
    assert body["ruleset"] == "free-text"
    assert body["pointsPerCorrectAnswer"] == 1
    assert "pointsExactMatch" not in body

    assert client.put("/api/quizzes/friday/rounds/9/ruleset", json={"ruleset": "number"}).status_code == 404
    assert client.put("/api/quizzes/friday/rounds/2/ruleset", json={"ruleset": "essay"}).status_code == 422


def test_submission_upsert_and_lookup(client):
    first = submit(client, "Owls", 1, {1: "A"})
    second = submit(client, "Owls", 1, {1: "B", 2: "B"})
    assert first == second

    listing = client.get("/api/submissions", params={"quizId": "friday"}).json()
    assert len(listing) == 1
    assert listing[0]["answers"] == [{"number": 1, "answer": "B"}, {"number": 2, "answer": "B"}]

    one = client.get("/api/submissions/one", params={"quizId": "friday", "teamName": "Owls", "roundNumber": 1})
    assert one.status_code == 200
    assert one.json()["id"] == first

    missing = client.get("/api/submissions/one", params={"quizId": "friday", "teamName": "Owls", "roundNumber": 2})
    assert missing.status_code == 404
    assert "round 2" in missing.json()["detail"]


def test_submission_requires_team(client):
    response = client.post(
        "/api/submissions", json={"quizId": "friday", "teamName": "  ", "roundNumber": 1, "answers": []}
    )
    assert response.status_code == 422


def test_leaderboard(client):
    client.post("/api/quizzes", json=QUIZ)
    submit(client, "Owls", 1, {1: "A", 2: "C"})
    submit(client, "Foxes", 1, {1: "A", 2: "B"})
    submit(client, "Owls", 2, {1: 1066})
    submit(client, "Foxes", 2, {1: "1070"})
    submit(client, "Owls", 3, {1: "moscow"})
    submit(client, "Latecomers", 3, {1: "Moskva"})

    board = client.get("/api/quizzes/friday/leaderboard").json()
    assert board["scope"] == "all"
    assert board["teams"] == [
        {"teamName": "Owls", "points": 6},
        {"teamName": "Foxes", "points": 4},
        {"teamName": "Bears", "points": 0},
        {"teamName": "Latecomers", "points": 0},
    ]

    round_two = client.get("/api/quizzes/friday/leaderboard", params={"scope": "2"}).json()
    assert round_two["scope"] == 2
    assert round_two["teams"][0] == {"teamName": "Owls", "points": 3}
    assert [t["teamName"] for t in round_two["teams"]] == ["Owls", "Bears", "Foxes"]


def test_leaderboard_errors(client):
    assert client.get("/api/quizzes/missing/leaderboard").status_code == 404
    client.post("/api/quizzes", json=QUIZ)
    assert client.get("/api/quizzes/friday/leaderboard", params={"scope": "last"}).status_code == 400


def test_parse_answer_sheet(client):
    document = {
        "document": {
            "entities": [
                {"type": "answer", "mentionText": "3. Paris"},
                {"type": "answer", "mentionText": "1. Rome"},
                {"type": "other", "mentionText": "2. skip"},
            ]
        }
    }
    response = client.post("/api/answer-sheets/parse", json=document)
    assert response.status_code == 200
    assert response.json() == {
        "answers": [{"number": 1, "text": "Rome"}, {"number": 3, "text": "Paris"}],
        "count": 2,
    }


def test_ocr_not_configured(client):
    response = client.post(
        "/api/answer-sheets/ocr", files={"file": ("sheet.pdf", b"%PDF-1.4", "application/pdf")}
    )
    assert response.status_code == 500
    assert "not configured" in response.json()["detail"]


def test_ocr_rejects_non_pdf(client):
    response = client.post("/api/answer-sheets/ocr", files={"file": ("sheet.png", b"\x89PNG", "image/png")})
    assert response.status_code == 400


def test_ocr_parses_processed_document(client, monkeypatch):
    calls = []

    async def fake_process(ocr_client, cache, file_name, content):
        calls.append((file_name, content, cache is state.OCR_CACHE))
        return {"document": {"entities": [{"type": "answer", "mentionText": "1. 1066"}]}}

    monkeypatch.setattr(answer_sheets, "process_with_cache", fake_process)
    response = client.post(
        "/api/answer-sheets/ocr", files={"file": ("sheet.pdf", b"%PDF-1.4", "application/pdf")}
    )
    assert response.status_code == 200
    assert response.json()["answers"] == [{"number": 1, "text": "1066"}]
    assert calls == [("sheet.pdf", b"%PDF-1.4", True)]


def test_question_import_not_configured(client):
    response = client.post("/api/question-import", json={"ruleset": "number", "text": "1. Year of Hastings? 1066"})
    assert response.status_code == 500
    assert "VERTEX_API_KEY" in response.json()["detail"]


def test_question_import_validates_request(client):
    assert client.post("/api/question-import", json={"ruleset": "number", "text": "  "}).status_code == 400
    assert client.post("/api/question-import", json={"ruleset": "essay", "text": "Q?"}).status_code == 422


def test_question_import_returns_questions(client, monkeypatch):
    async def fake_parse(self, ruleset, text):
        return clean_questions(ruleset, [{"text": "Year of Hastings?", "correctAnswer": "1066"}])

    monkeypatch.setattr(QuestionImportClient, "parse_round_questions", fake_parse)
    response = client.post("/api/question-import", json={"ruleset": "number", "text": "1. Year of Hastings? 1066"})
    assert response.status_code == 200
    assert response.json() == {"questions": [{"text": "Year of Hastings?", "correctAnswer": 1066.0}]}


def test_question_import_upstream_failure(client, monkeypatch):
    async def failing_parse(self, ruleset, text):
        raise QuestionImportError("Model did not return a JSON array.", details="{}")

    monkeypatch.setattr(QuestionImportClient, "parse_round_questions", failing_parse)
    response = client.post("/api/question-import", json={"ruleset": "free-text", "text": "Q?"})
    assert response.status_code == 502
    assert response.json()["detail"] == {"error": "Model did not return a JSON array.", "details": "{}"}


def test_dot_team_name_appears_on_leaderboard(client):
    client.post("/api/quizzes", json=QUIZ)
    submit(client, "..", 1, {1: "A"})
    board = client.get("/api/quizzes/friday/leaderboard").json()
    assert {"teamName": "..", "points": 2} in board["teams"]


def test_store_backed_routes_run_in_threadpool():
    """File I/O routes are plain functions so FastAPI runs them off the event loop"""
    store_paths = ("/api/quizzes", "/api/submissions")
    endpoints = [
        route.endpoint for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith(store_paths)
    ]
    assert len(endpoints) >= 10
    assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)
