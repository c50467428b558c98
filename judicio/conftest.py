from unittest.mock import MagicMock

import pytest

from judicio.app import create_app


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def completion():
    client = MagicMock()
    client.configured = True
    client.complete.return_value = "ok"
    return client


@pytest.fixture
def app(upload_dir, completion):
    app = create_app({
        "TESTING": True,
        "GROQ_API_KEY": "test-key",
        "UPLOAD_FOLDER": str(upload_dir),
        "USE_EXAMPLE_INPUT": False,
        "CLAUSE_CLASSIFIER_CMD": None,
        "OCR_ENABLED": False,
    })
    app.extensions["judicio"]["completion"] = completion
    return app


@pytest.fixture
def client(app):
    return app.test_client()
