# app.py - Judicio backend: Flask routes over the Groq completion API
import os
import uuid
import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from werkzeug.utils import secure_filename

from judicio.config import Config, configure_logging
from judicio.classifier import ClauseClassifier
from judicio.completion import CompletionClient, CompletionServiceError
from judicio.utils import prompt_builder as prompts
from judicio.utils.response_parser import (
    FALLBACK_OUTCOME,
    NO_DATE,
    NO_TIMELINE,
    parse_arguments,
    parse_language,
    parse_outcome,
    parse_timeline,
)
from judicio.utils.text_extractor import (
    EXTRACTED_METHODS,
    detect_tesseract,
    extract_text,
    file_extension,
    remove_file,
    truncate_text,
)

logger = logging.getLogger("judicio-backend")

SERVER_UNREACHABLE = "Could not connect to Judicio server."
NO_RESPONSE = "No response from Judicio server."
NO_SUMMARY = "No summary generated."


def _request_data():
    """JSON body, falling back to form fields; always a dict."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    return data if isinstance(data, dict) else {}


def _wants_example(data, app):
    if app.config["USE_EXAMPLE_INPUT"]:
        return True
    flag = data.get("useExample")
    if isinstance(flag, bool):
        return flag
    # form bodies carry strings
    return str(flag or "").strip().lower() in ("1", "true", "yes", "on")


def _save_upload(file, upload_folder):
    safe_name = secure_filename(file.filename) or "upload"
    file_path = os.path.join(upload_folder, f"{uuid.uuid4().hex}_{safe_name}")
    file.save(file_path)
    return file_path


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_FILE_SIZE"]

    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    CORS(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "OPTIONS"],
        supports_credentials=False,
    )

    if not app.config["GROQ_API_KEY"]:
        logger.warning("GROQ_API_KEY is missing; completion endpoints will answer 503 until it is set")

    tesseract_cmd = detect_tesseract(app.config["TESSERACT_CMD"]) if app.config["OCR_ENABLED"] else None

    app.extensions["judicio"] = {
        "completion": CompletionClient(
            api_key=app.config["GROQ_API_KEY"],
            model=app.config["GROQ_MODEL"],
            timeout=app.config["GROQ_TIMEOUT"],
            max_retries=app.config["GROQ_MAX_RETRIES"],
        ),
        "classifier": ClauseClassifier(
            app.config["CLAUSE_CLASSIFIER_CMD"],
            timeout=app.config["CLAUSE_CLASSIFIER_TIMEOUT"],
        ),
        "tesseract_cmd": tesseract_cmd,
    }

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app):
    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return jsonify({"summary": "File too large.", "error": e.description}), 413

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        logger.exception("Unhandled error on %s", request.path)
        return jsonify({"error": "Internal server error"}), 500


def register_routes(app):
    services = app.extensions["judicio"]

    def complete(endpoint, messages, params):
        try:
            return services["completion"].complete(messages, **params)
        except CompletionServiceError:
            logger.error("Completion service failure on %s", endpoint, exc_info=True)
            raise

    @app.route("/", methods=["GET"])
    def index():
        return "Judicio Backend Active", 200, {"Content-Type": "text/plain; charset=utf-8"}

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify(status="ok", completion_configured=services["completion"].configured), 200

    # ---------------- chat ----------------
    @app.route("/chat", methods=["POST"])
    def chat():
        data = _request_data()
        prompt = str(data.get("prompt") or data.get("message") or "").strip()
        if not prompt:
            if not _wants_example(data, app):
                return jsonify({"text": "Missing prompt input.", "error": "prompt or message is required"}), 400
            prompt = prompts.EXAMPLE_CHAT_PROMPT

        try:
            text = complete("/chat", prompts.build_chat_messages(prompt), prompts.CHAT_PARAMS)
        except CompletionServiceError as e:
            return jsonify({"text": SERVER_UNREACHABLE, "error": str(e)}), 503
        return jsonify({"text": text or NO_RESPONSE}), 200

    # ---------------- document analyzer ----------------
    @app.route("/api/analyze-document", methods=["POST"])
    def analyze_document():
        file = request.files.get("document")
        if not (file and getattr(file, "filename", None)):
            return jsonify({"summary": "No document uploaded.", "error": "multipart field 'document' is required"}), 400

        extension = file_extension(file.filename)
        file_path = None
        try:
            file_path = _save_upload(file, app.config["UPLOAD_FOLDER"])
            text, method = extract_text(
                file_path,
                extension,
                tesseract_cmd=services["tesseract_cmd"],
                ocr_dpi=app.config["OCR_DPI"],
                ocr_threshold=app.config["OCR_THRESHOLD"],
            )
        finally:
            # extract_text already removed it unless saving failed half-way
            if file_path and os.path.exists(file_path):
                remove_file(file_path)

        if method not in EXTRACTED_METHODS:
            logger.info("Document %r not analyzed: %s", file.filename, method)
            return jsonify({"language": "Unknown", "summary": text, "error": method}), 200

        text = truncate_text(text, app.config["DOCUMENT_CHAR_LIMIT"])
        logger.info("Extracted %d chars from %r via %s", len(text), file.filename, method)

        payload = {}
        classifier = services["classifier"]
        if classifier.enabled:
            payload["ml_clauses"] = classifier.classify(text)

        try:
            reply = complete("/api/analyze-document", prompts.build_document_messages(text), prompts.DOCUMENT_PARAMS)
        except CompletionServiceError as e:
            return jsonify({"summary": SERVER_UNREACHABLE, "error": str(e)}), 503

        if reply is None:
            payload.update(language="Unknown", summary=NO_SUMMARY)
        else:
            language, summary = parse_language(reply)
            payload.update(language=language, summary=summary)
        return jsonify(payload), 200

    # ---------------- case predictor ----------------
    @app.route("/predict-outcome", methods=["POST"])
    def predict_outcome():
        data = _request_data()
        required = ("caseType", "jurisdiction", "summary")
        missing = prompts.missing_fields(data, required)
        if missing:
            if not _wants_example(data, app):
                return jsonify({
                    "outcome": "Missing required fields.",
                    "reasoning": "",
                    "confidence": "",
                    "error": "missing: " + ", ".join(missing),
                }), 400
            data = prompts.fill_with_example(data, prompts.EXAMPLE_CASE)

        messages = prompts.build_prediction_messages(data["caseType"], data["jurisdiction"], data["summary"])
        try:
            reply = complete("/predict-outcome", messages, prompts.PREDICTION_PARAMS)
        except CompletionServiceError as e:
            return jsonify({"outcome": SERVER_UNREACHABLE, "reasoning": "", "confidence": "", "error": str(e)}), 503

        if reply is None:
            return jsonify(dict(FALLBACK_OUTCOME)), 200
        return jsonify(parse_outcome(reply)), 200

    # ---------------- case timeline ----------------
    @app.route("/generate-timeline", methods=["POST"])
    def generate_timeline():
        data = _request_data()
        case_facts = str(data.get("prompt") or data.get("caseFacts") or "").strip()
        if not case_facts:
            if not _wants_example(data, app):
                return jsonify([{"date": "Error", "event": "No case facts provided."}]), 400
            case_facts = prompts.EXAMPLE_CASE_FACTS

        try:
            reply = complete("/generate-timeline", prompts.build_timeline_messages(case_facts), prompts.TIMELINE_PARAMS)
        except CompletionServiceError:
            return jsonify([{"date": "Error", "event": "Could not generate timeline."}]), 503

        if reply is None:
            return jsonify([{"date": NO_DATE, "event": NO_TIMELINE}]), 200
        return jsonify(parse_timeline(reply)), 200

    # ---------------- argument strategist ----------------
    @app.route("/generate-arguments", methods=["POST"])
    def generate_arguments():
        data = _request_data()
        if prompts.missing_fields(data, ("coreArgument",)):
            if not _wants_example(data, app):
                return jsonify([{"argument": "No argument statement provided."}]), 400
            data = prompts.fill_with_example(data, prompts.EXAMPLE_ARGUMENT)

        messages = prompts.build_argument_messages(data["coreArgument"], data.get("argumentType"))
        try:
            reply = complete("/generate-arguments", messages, prompts.ARGUMENT_PARAMS)
        except CompletionServiceError:
            return jsonify([{"argument": SERVER_UNREACHABLE}]), 503

        blocks = parse_arguments(reply or "")
        if not blocks:
            blocks = [{"argument": NO_RESPONSE}]
        return jsonify(blocks), 200


def main():
    configure_logging()
    app = create_app()
    logger.info("Judicio backend running at http://localhost:%s", app.config["PORT"])
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=False)


if __name__ == "__main__":
    main()
