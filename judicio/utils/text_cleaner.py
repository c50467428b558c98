import re

def clean_extracted_text(text):
    """
    Normalize text pulled out of PDFs (native or OCR) before it goes into a prompt:
    unify line endings, squeeze runs of blank lines and spaces, drop page markers.
    """
    if not text:
        return ""

    text = re.sub(r'\r\n?', '\n', text)

    # Remove page markers if present
    text = re.sub(r'\[Page \d+\]\s*', '', text)

    # Collapse horizontal whitespace but keep line structure
    text = re.sub(r'[ \t\f\v]{2,}', ' ', text)
    text = re.sub(r'[ \t]+\n', '\n', text)

    # No more than one blank line in a row
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()
