# text_extractor.py - plain text from uploaded PDF / DOCX / TXT files
import io
import os
import re
import shutil
import logging
import subprocess

import docx
import fitz  # PyMuPDF
import pytesseract
from PIL import Image, ImageEnhance

from judicio.utils.text_cleaner import clean_extracted_text

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("pdf", "docx", "txt")

UNSUPPORTED_TYPE = "Unsupported file type. Please upload a PDF, DOCX, or TXT document."
NO_TEXT_PDF = "No text detected in PDF."
NO_TEXT_DOCX = "No text detected in DOCX."
EMPTY_TXT = "Empty TXT file."
READ_ERROR = "Error reading document. Please try again."

# methods that mean real text came back; everything else carries a sentinel
EXTRACTED_METHODS = frozenset({"pdf_native", "ocr", "docx", "txt"})


def file_extension(filename):
    """Lower-cased text after the last dot of the original filename, '' if none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].strip().lower()


def truncate_text(text, limit):
    if limit and len(text) > limit:
        return text[:limit]
    return text


def remove_file(file_path):
    try:
        os.remove(file_path)
        return True
    except FileNotFoundError:
        return False
    except OSError:
        logger.exception("Failed to remove upload %s", file_path)
        return False


# ---------------- tesseract detection ----------------
def detect_tesseract(explicit_path=None):
    candidates = []
    if explicit_path:
        candidates.append(explicit_path)
    which_path = shutil.which("tesseract")
    if which_path:
        candidates.append(which_path)

    # dedupe while preserving order
    seen = set()
    candidates = [c for c in candidates if c and not (c in seen or seen.add(c))]

    for candidate in candidates:
        try:
            out = subprocess.run([candidate, "-v"], capture_output=True, text=True, check=True, timeout=5)
            first_line = out.stdout.splitlines()[0] if out.stdout else candidate
            logger.info("Tesseract found: %s", first_line)
            return candidate
        except (OSError, subprocess.SubprocessError):
            logger.debug("Tesseract candidate failed: %s", candidate)

    logger.warning("Tesseract not detected; OCR fallback disabled")
    return None


# ---------------- PDF helpers ----------------
def is_text_rich(text, threshold):
    if not text:
        return False
    return len(re.sub(r'\s+', '', text)) >= threshold


def ocr_page(page, tesseract_cmd, dpi):
    pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    pix = page.get_pixmap(dpi=dpi)
    img = Image.open(io.BytesIO(pix.tobytes("png")))
    if max(img.size) > 2500:
        ratio = 2500 / max(img.size)
        img = img.resize((int(img.size[0] * ratio), int(img.size[1] * ratio)), Image.Resampling.LANCZOS)
    img = ImageEnhance.Contrast(img.convert('L')).enhance(1.5)
    return pytesseract.image_to_string(img, config="--psm 6 --oem 3")


def safe_ocr_page(page, tesseract_cmd, dpi):
    try:
        return ocr_page(page, tesseract_cmd, dpi)
    except Exception:
        logger.exception("OCR error on page %d", page.number + 1)
        return ""


def extract_pdf(file_path, tesseract_cmd=None, ocr_dpi=150, ocr_threshold=30):
    with open(file_path, "rb") as fh:
        data = fh.read()

    with fitz.open(stream=data, filetype="pdf") as doc:
        text = "\n".join(page.get_text("text") or "" for page in doc)
        method = "pdf_native"
        if not is_text_rich(text, ocr_threshold) and tesseract_cmd:
            logger.info("PDF has little native text, running OCR on %d pages", len(doc))
            ocr_text = "\n".join(safe_ocr_page(page, tesseract_cmd, ocr_dpi) for page in doc)
            # keep whatever native text there was if OCR found nothing
            if clean_extracted_text(ocr_text):
                text, method = ocr_text, "ocr"

    text = clean_extracted_text(text)
    if not text:
        return NO_TEXT_PDF, "empty"
    return text, method


def extract_docx(file_path):
    document = docx.Document(file_path)
    text = "\n".join(p.text for p in document.paragraphs).strip()
    if not text:
        return NO_TEXT_DOCX, "empty"
    return text, "docx"


def extract_txt(file_path):
    with open(file_path, "r", encoding="utf-8", errors="replace") as fh:
        text = fh.read().strip()
    if not text:
        return EMPTY_TXT, "empty"
    return text, "txt"


def extract_text(file_path, extension, tesseract_cmd=None, ocr_dpi=150, ocr_threshold=30):
    """
    Extract plain text from a stored upload.

    `extension` comes from the original filename, not the stored path.
    Returns (text, method). When method is not in EXTRACTED_METHODS the text is a
    user-facing sentinel message. Library errors are logged and converted, never
    raised. The file at `file_path` is removed before returning, on every path.
    """
    try:
        extension = (extension or "").lower().lstrip(".")
        if extension == "pdf":
            return extract_pdf(file_path, tesseract_cmd, ocr_dpi, ocr_threshold)
        if extension == "docx":
            return extract_docx(file_path)
        if extension == "txt":
            return extract_txt(file_path)
        return UNSUPPORTED_TYPE, "unsupported"
    except Exception:
        logger.exception("Error reading document (%s)", extension or "no extension")
        return READ_ERROR, "error"
    finally:
        remove_file(file_path)
