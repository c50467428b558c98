"""End-to-end tests for the Flask routes, completion service mocked."""

import io
import logging
from unittest.mock import MagicMock

import pytest

from judicio.app import create_app
from judicio.completion import CompletionServiceError
from judicio.utils import prompt_builder as prompts
from judicio.utils.text_extractor import UNSUPPORTED_TYPE


def _upload(client, content, filename):
    return client.post(
        "/api/analyze-document",
        data={"document": (io.BytesIO(content), filename)},
        content_type="multipart/form-data",
    )


# ── Liveness ─────────────────────────────────────────────────────────


def test_root_is_plain_text(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.mimetype == "text/plain"
    assert "Judicio" in resp.get_data(as_text=True)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "completion_configured": True}


def test_cors_allows_any_origin(client):
    resp = client.get("/", headers={"Origin": "https://example.org"})
    assert resp.headers.get("Access-Control-Allow-Origin") == "*"


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# ── /chat ────────────────────────────────────────────────────────────


def test_chat_returns_model_text(client, completion):
    completion.complete.return_value = "A contract needs offer and acceptance."
    resp = client.post("/chat", json={"prompt": "What makes a contract?"})
    assert resp.status_code == 200
    assert resp.get_json() == {"text": "A contract needs offer and acceptance."}
    messages = completion.complete.call_args.args[0]
    assert messages[1] == {"role": "user", "content": "What makes a contract?"}
    assert completion.complete.call_args.kwargs == prompts.CHAT_PARAMS


def test_chat_accepts_message_field(client, completion):
    client.post("/chat", json={"message": "Explain estoppel"})
    assert completion.complete.call_args.args[0][1]["content"] == "Explain estoppel"


def test_chat_accepts_form_body(client, completion):
    client.post("/chat", data={"prompt": "Explain estoppel"})
    assert completion.complete.call_args.args[0][1]["content"] == "Explain estoppel"


def test_chat_missing_prompt_is_400(client, completion):
    resp = client.post("/chat", json={})
    assert resp.status_code == 400
    assert resp.get_json()["text"] == "Missing prompt input."
    completion.complete.assert_not_called()


def test_chat_example_prompt_on_request(client, completion):
    resp = client.post("/chat", json={"useExample": True})
    assert resp.status_code == 200
    assert completion.complete.call_args.args[0][1]["content"] == prompts.EXAMPLE_CHAT_PROMPT


@pytest.mark.parametrize("flag", ["true", "1", "on", "True"])
def test_chat_example_prompt_from_form_flag(client, completion, flag):
    resp = client.post("/chat", data={"useExample": flag})
    assert resp.status_code == 200
    assert completion.complete.call_args.args[0][1]["content"] == prompts.EXAMPLE_CHAT_PROMPT


@pytest.mark.parametrize("flag", ["false", "0", "", False])
def test_example_flag_off_values(client, completion, flag):
    resp = client.post("/predict-outcome", json={"useExample": flag})
    assert resp.status_code == 400
    completion.complete.assert_not_called()


def test_chat_no_choices_placeholder(client, completion):
    completion.complete.return_value = None
    resp = client.post("/chat", json={"prompt": "hi"})
    assert resp.status_code == 200
    assert resp.get_json() == {"text": "No response from Judicio server."}


def test_chat_service_failure_is_503(client, completion, caplog):
    completion.complete.side_effect = CompletionServiceError("Connection error.")
    with caplog.at_level(logging.ERROR, logger="judicio-backend"):
        resp = client.post("/chat", json={"prompt": "hi"})
    assert resp.status_code == 503
    body = resp.get_json()
    assert body["text"] == "Could not connect to Judicio server."
    assert body["error"] == "Connection error."
    assert "Completion service failure on /chat" in caplog.text


# ── /api/analyze-document ────────────────────────────────────────────


def test_analyze_txt_document(client, completion, upload_dir):
    completion.complete.return_value = "Language: English\n\nA lease between two parties."
    resp = _upload(client, b"This lease is made between A and B.", "lease.TXT")
    assert resp.status_code == 200
    assert resp.get_json() == {"language": "English", "summary": "A lease between two parties."}
    messages = completion.complete.call_args.args[0]
    assert messages[1]["content"] == "This lease is made between A and B."
    assert list(upload_dir.iterdir()) == []


def test_analyze_truncates_document(app, client, completion):
    app.config["DOCUMENT_CHAR_LIMIT"] = 10
    _upload(client, b"abcdefghijklmnopqrstuvwxyz", "long.txt")
    assert completion.complete.call_args.args[0][1]["content"] == "abcdefghij"


def test_analyze_unsupported_type(client, completion, upload_dir):
    resp = _upload(client, b"MZ\x90\x00", "virus.exe")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["summary"] == UNSUPPORTED_TYPE
    assert body["error"] == "unsupported"
    completion.complete.assert_not_called()
    assert list(upload_dir.iterdir()) == []


def test_analyze_empty_txt_skips_model(client, completion, upload_dir):
    resp = _upload(client, b"   ", "empty.txt")
    assert resp.status_code == 200
    assert resp.get_json()["error"] == "empty"
    completion.complete.assert_not_called()
    assert list(upload_dir.iterdir()) == []


def test_analyze_missing_document_is_400(client):
    resp = client.post("/api/analyze-document", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["summary"] == "No document uploaded."


def test_analyze_service_failure_still_removes_upload(client, completion, upload_dir):
    completion.complete.side_effect = CompletionServiceError("timed out")
    resp = _upload(client, b"Some facts", "facts.txt")
    assert resp.status_code == 503
    assert resp.get_json()["summary"] == "Could not connect to Judicio server."
    assert list(upload_dir.iterdir()) == []


def test_analyze_without_language_line(client, completion):
    completion.complete.return_value = "Resumen del contrato."
    body = _upload(client, b"Contrato", "c.txt").get_json()
    assert body == {"language": "Auto-Detected", "summary": "Resumen del contrato."}


def test_analyze_no_choices(client, completion):
    completion.complete.return_value = None
    body = _upload(client, b"Contract", "c.txt").get_json()
    assert body["summary"] == "No summary generated."


def test_analyze_includes_ml_clauses_when_classifier_configured(app, client, completion):
    classifier = MagicMock(enabled=True)
    classifier.classify.return_value = [{"label": "termination", "score": 0.8}]
    app.extensions["judicio"]["classifier"] = classifier
    completion.complete.return_value = "Language: English\nSummary text"
    body = _upload(client, b"The lease may be terminated.", "c.txt").get_json()
    assert body["ml_clauses"] == [{"label": "termination", "score": 0.8}]
    classifier.classify.assert_called_once_with("The lease may be terminated.")


def test_analyze_omits_ml_clauses_without_classifier(client, completion):
    completion.complete.return_value = "Language: English\nSummary text"
    body = _upload(client, b"Text", "c.txt").get_json()
    assert "ml_clauses" not in body


def test_oversized_upload_is_413(upload_dir, completion):
    app = create_app({
        "TESTING": True,
        "GROQ_API_KEY": "test-key",
        "UPLOAD_FOLDER": str(upload_dir),
        "MAX_FILE_SIZE": 64,
    })
    app.extensions["judicio"]["completion"] = completion
    resp = _upload(app.test_client(), b"x" * 1024, "big.txt")
    assert resp.status_code == 413
    assert resp.get_json()["summary"] == "File too large."
    completion.complete.assert_not_called()


# ── /predict-outcome ─────────────────────────────────────────────────

CASE = {"caseType": "Contract", "jurisdiction": "Kerala", "summary": "Late delivery"}


def test_predict_outcome_parsed(client, completion):
    completion.complete.return_value = "Outcome: Plaintiff wins\nReasoning: strong evidence\nConfidence: 82%"
    resp = client.post("/predict-outcome", json=CASE)
    assert resp.status_code == 200
    assert resp.get_json() == {"outcome": "Plaintiff wins", "reasoning": "strong evidence", "confidence": "82%"}
    user = completion.complete.call_args.args[0][1]["content"]
    assert "Jurisdiction: Kerala" in user


def test_predict_outcome_unlabelled_reply_falls_back(client, completion):
    completion.complete.return_value = "I cannot predict this."
    assert client.post("/predict-outcome", json=CASE).get_json() == {
        "outcome": "No clear outcome.",
        "reasoning": "No reasoning found.",
        "confidence": "Unknown",
    }


def test_parse_miss_logged_apart_from_service_failure(client, completion, caplog):
    completion.complete.return_value = "I cannot predict this."
    with caplog.at_level(logging.INFO):
        resp = client.post("/predict-outcome", json=CASE)
    assert resp.status_code == 200
    misses = [r for r in caplog.records if r.name == "judicio.utils.response_parser"]
    assert misses and all(r.levelno == logging.INFO for r in misses)
    assert any("Parse miss: no 'Outcome' label" in r.getMessage() for r in misses)
    assert "Completion service failure" not in caplog.text


def test_predict_outcome_empty_fields_is_error_response(client, completion):
    resp = client.post("/predict-outcome", json={"caseType": "", "jurisdiction": "", "summary": ""})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["outcome"] == "Missing required fields."
    assert "caseType" in body["error"]
    completion.complete.assert_not_called()


def test_predict_outcome_example_input_from_config(app, client, completion):
    app.config["USE_EXAMPLE_INPUT"] = True
    completion.complete.return_value = "Outcome: Settled"
    resp = client.post("/predict-outcome", json={})
    assert resp.status_code == 200
    user = completion.complete.call_args.args[0][1]["content"]
    assert prompts.EXAMPLE_CASE["jurisdiction"] in user


def test_predict_outcome_service_failure(client, completion):
    completion.complete.side_effect = CompletionServiceError("quota exceeded")
    resp = client.post("/predict-outcome", json=CASE)
    assert resp.status_code == 503
    body = resp.get_json()
    assert set(body) == {"outcome", "reasoning", "confidence", "error"}


# ── /generate-timeline ───────────────────────────────────────────────


def test_timeline_from_prompt(client, completion):
    completion.complete.return_value = "2020-01-15 - Contract signed\n2020-03-25 - Lockdown begins"
    resp = client.post("/generate-timeline", json={"prompt": "facts"})
    assert resp.status_code == 200
    assert resp.get_json() == [
        {"date": "2020-01-15", "event": "Contract signed"},
        {"date": "2020-03-25", "event": "Lockdown begins"},
    ]


def test_timeline_from_case_facts(client, completion):
    completion.complete.return_value = "2019: Filed"
    client.post("/generate-timeline", json={"caseFacts": "The suit was filed in 2019."})
    assert completion.complete.call_args.args[0][1]["content"].endswith("The suit was filed in 2019.")


def test_timeline_missing_facts_is_400(client):
    resp = client.post("/generate-timeline", json={})
    assert resp.status_code == 400
    assert resp.get_json() == [{"date": "Error", "event": "No case facts provided."}]


def test_timeline_example_facts_are_spanish(client, completion):
    completion.complete.return_value = "2020: Contrato"
    client.post("/generate-timeline", json={"useExample": True})
    assert prompts.EXAMPLE_CASE_FACTS in completion.complete.call_args.args[0][1]["content"]


def test_timeline_service_failure(client, completion):
    completion.complete.side_effect = CompletionServiceError("down")
    resp = client.post("/generate-timeline", json={"prompt": "facts"})
    assert resp.status_code == 503
    assert resp.get_json() == [{"date": "Error", "event": "Could not generate timeline."}]


# ── /generate-arguments ──────────────────────────────────────────────


def test_arguments_parsed(client, completion):
    completion.complete.return_value = (
        "Argument: Title A\nAnalysis: a1\nStrategy: s1\n"
        "Argument: Title B\nAnalysis: a2\nStrategy: s2"
    )
    resp = client.post("/generate-arguments", json={"coreArgument": "Rent is owed", "argumentType": "against"})
    assert resp.status_code == 200
    assert resp.get_json() == [
        {"argument": "Title A", "analysis": "a1", "response": "s1"},
        {"argument": "Title B", "analysis": "a2", "response": "s2"},
    ]
    assert "3 arguments against" in completion.complete.call_args.args[0][1]["content"]


def test_arguments_missing_statement_is_400(client, completion):
    resp = client.post("/generate-arguments", json={"argumentType": "for"})
    assert resp.status_code == 400
    assert resp.get_json() == [{"argument": "No argument statement provided."}]
    completion.complete.assert_not_called()


def test_arguments_example_statement(client, completion):
    completion.complete.return_value = "Argument: A\nAnalysis: b\nStrategy: c"
    client.post("/generate-arguments", json={"useExample": True})
    user = completion.complete.call_args.args[0][1]["content"]
    assert prompts.EXAMPLE_ARGUMENT["coreArgument"] in user


def test_arguments_empty_reply(client, completion):
    completion.complete.return_value = None
    resp = client.post("/generate-arguments", json={"coreArgument": "x"})
    assert resp.status_code == 200
    assert resp.get_json() == [{"argument": "No response from Judicio server."}]


def test_arguments_service_failure(client, completion):
    completion.complete.side_effect = CompletionServiceError("down")
    resp = client.post("/generate-arguments", json={"coreArgument": "x"})
    assert resp.status_code == 503
    assert resp.get_json() == [{"argument": "Could not connect to Judicio server."}]


# ── Startup without an API key ───────────────────────────────────────


def test_missing_api_key_warns_and_degrades(upload_dir, caplog):
    with caplog.at_level(logging.WARNING, logger="judicio-backend"):
        app = create_app({"TESTING": True, "GROQ_API_KEY": None, "UPLOAD_FOLDER": str(upload_dir)})
    assert "GROQ_API_KEY is missing" in caplog.text

    client = app.test_client()
    assert client.get("/health").get_json()["completion_configured"] is False
    resp = client.post("/chat", json={"prompt": "hi"})
    assert resp.status_code == 503
    assert "GROQ_API_KEY" in resp.get_json()["error"]


@pytest.mark.parametrize("path", ["/chat", "/predict-outcome", "/generate-timeline", "/generate-arguments"])
def test_non_object_json_treated_as_empty(client, path):
    resp = client.post(path, json=["not", "an", "object"])
    assert resp.status_code == 400
    assert resp.is_json
