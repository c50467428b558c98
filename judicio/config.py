# config.py - environment loading and settings for the Judicio backend
import os
import logging
from pathlib import Path

from dotenv import load_dotenv, dotenv_values

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DOTENV_PATH = BASE_DIR / ".env"


def load_environment(dotenv_path=DOTENV_PATH):
    """
    Load .env into os.environ.

    Some editors save .env with a BOM, which makes python-dotenv read the first
    key as "\\ufeffGROQ_API_KEY". Keys are re-injected with the prefix stripped
    when the clean name is not already set.
    """
    path = Path(dotenv_path)
    if not path.exists():
        logger.debug(".env not found at %s", path)
        return []

    load_dotenv(dotenv_path=path, override=False)

    fixed_keys = []
    for key, value in dotenv_values(path).items():
        if key is None:
            continue
        clean_key = key.lstrip("\ufeff\xfe\xff").strip()
        if not clean_key:
            continue
        fixed_keys.append(clean_key)
        if value is None:
            continue
        if not os.getenv(clean_key):
            os.environ[clean_key] = value
    if not fixed_keys:
        logger.warning(".env at %s is empty or malformed", path)
    return fixed_keys


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


load_environment()


class Config:
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
    GROQ_TIMEOUT = float(os.getenv("GROQ_TIMEOUT", "30"))
    GROQ_MAX_RETRIES = int(os.getenv("GROQ_MAX_RETRIES", "0"))

    PORT = int(os.getenv("PORT", "5000"))
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", 50 * 1024 * 1024))
    DOCUMENT_CHAR_LIMIT = int(os.getenv("DOCUMENT_CHAR_LIMIT", "8000"))

    # canned inputs for demos; off unless asked for
    USE_EXAMPLE_INPUT = _flag("USE_EXAMPLE_INPUT")

    CLAUSE_CLASSIFIER_CMD = os.getenv("CLAUSE_CLASSIFIER_CMD")
    CLAUSE_CLASSIFIER_TIMEOUT = float(os.getenv("CLAUSE_CLASSIFIER_TIMEOUT", "60"))

    OCR_ENABLED = _flag("OCR_ENABLED")
    TESSERACT_CMD = os.getenv("TESSERACT_CMD")
    OCR_DPI = int(os.getenv("OCR_DPI", "150"))
    OCR_THRESHOLD = int(os.getenv("OCR_THRESHOLD", "30"))


def configure_logging(level=logging.INFO):
    logging.basicConfig(level=level)
