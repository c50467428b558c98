"""
Turn free-form model replies into records.

The prompts ask the model for labelled output ("Outcome: ...", "<date> - <event>",
"Argument: ..."), but nothing guarantees it complies. Every extractor here accepts
case-insensitive labels, any of ':', '-', en dash or em dash as separator, markdown
bold around labels, and falls back to fixed values instead of failing. A missing
label is logged at INFO level as a parse miss; it is not an error.

A label word repeated in prose ("the Outcome - if any - ...") can be picked up as a
field. That is a known limit of the approach.
"""
import re
import logging

logger = logging.getLogger(__name__)

FALLBACK_OUTCOME = {
    "outcome": "No clear outcome.",
    "reasoning": "No reasoning found.",
    "confidence": "Unknown",
}

NO_DATE = "—"
NO_TIMELINE = "No timeline generated."

UNTITLED_ARGUMENT = "Untitled Argument"
NO_ANALYSIS = "No analysis provided."
NO_STRATEGY = "No strategy provided."

DEFAULT_LANGUAGE = "Auto-Detected"

# separator after a label, tolerating "**Label:**" and "**Label**:"
_HEAD = r"\**[ \t]*[:\-–—]"
_SEP = _HEAD + r"\**\s*"


def _single_line_field(label, others):
    return re.compile(
        rf"\b{label}{_SEP}(.*?)(?=\b(?:{'|'.join(others)}){_HEAD}|$)",
        re.IGNORECASE | re.MULTILINE,
    )


_OUTCOME_RE = _single_line_field("Outcome", ("Reasoning", "Confidence"))
_CONFIDENCE_RE = _single_line_field("Confidence", ("Outcome", "Reasoning"))
_REASONING_RE = re.compile(
    rf"\bReasoning{_SEP}([\s\S]*?)(?=\b(?:Outcome|Confidence){_HEAD}|\Z)",
    re.IGNORECASE,
)

_BULLET_RE = re.compile(r"^(?:[-*•]+|\d+\))\s+")
# "1. 2023: ..." is a list marker, "15. März 2020" is a date
_NUMBERED_RE = re.compile(r"^\d{1,3}\.\s+(?=\d{4}(?![.\d]))")
# a hyphen only separates when it touches whitespace, so 2020-01-15 stays whole
_TIMELINE_SEP_RE = re.compile(r"[ \t]*[:–—][ \t]*|[ \t]+-[ \t]*|-[ \t]+")

_ARGUMENT_SPLIT_RE = re.compile(r"\bArgument[ \t]*#?\d*" + _HEAD + r"\**", re.IGNORECASE)
_ANALYSIS_RE = re.compile(
    rf"\bAnalysis{_SEP}([\s\S]*?)(?=(?:\bCounter[-\s]?)?Strategy{_HEAD}|\Z)",
    re.IGNORECASE,
)
_STRATEGY_RE = re.compile(rf"Strategy{_SEP}([\s\S]*)", re.IGNORECASE)

# only the first non-blank line; a "Language:" clause quoted later is summary text
_LANGUAGE_RE = re.compile(
    r"\s*\**[ \t]*(?:Detected[ \t]+)?(?:Primary[ \t]+)?Language" + _HEAD + r"\**[ \t]*([^\n]+)",
    re.IGNORECASE,
)


def _clean(value):
    return value.strip().strip("*").strip()


def _capture(pattern, text, label):
    match = pattern.search(text or "")
    value = _clean(match.group(1)) if match else ""
    if not value:
        logger.info("Parse miss: no '%s' label in model reply", label)
    return value


def parse_outcome(text):
    """Outcome / Reasoning / Confidence record from a prediction reply."""
    return {
        "outcome": _capture(_OUTCOME_RE, text, "Outcome") or FALLBACK_OUTCOME["outcome"],
        "reasoning": _capture(_REASONING_RE, text, "Reasoning") or FALLBACK_OUTCOME["reasoning"],
        "confidence": _capture(_CONFIDENCE_RE, text, "Confidence") or FALLBACK_OUTCOME["confidence"],
    }


def render_outcome(record):
    """Inverse of parse_outcome: the labelled template the model is asked to produce."""
    return "Outcome: {outcome}\nReasoning: {reasoning}\nConfidence: {confidence}".format(**record)


def parse_timeline_line(line):
    line = _BULLET_RE.sub("", line.strip().replace("**", "")).strip()
    numbered = _NUMBERED_RE.match(line)
    if numbered and _TIMELINE_SEP_RE.search(line, numbered.end()):
        line = line[numbered.end():]
    match = _TIMELINE_SEP_RE.search(line)
    if not match:
        return {"date": NO_DATE, "event": line}
    date = line[:match.start()].strip()
    return {"date": date or NO_DATE, "event": line[match.end():].strip()}


def parse_timeline(text):
    """One {date, event} per non-blank line, in input order."""
    text = text or ""
    lines = [ln for ln in text.split("\n") if ln.strip()]
    if not lines:
        logger.info("Parse miss: empty timeline reply")
        return [{"date": NO_DATE, "event": text.strip() or NO_TIMELINE}]
    return [parse_timeline_line(ln) for ln in lines]


def parse_argument_block(segment):
    title = _clean(segment.lstrip(" \t").split("\n", 1)[0])
    analysis = _capture(_ANALYSIS_RE, segment, "Analysis")
    strategy = _capture(_STRATEGY_RE, segment, "Strategy")
    return {
        "argument": title or UNTITLED_ARGUMENT,
        "analysis": analysis or NO_ANALYSIS,
        "response": strategy or NO_STRATEGY,
    }


def parse_arguments(text):
    """
    Split a reply into argument blocks on "Argument:" labels.

    Text before the first label (the model's preamble) is dropped. A reply with no
    label at all is treated as a single block.
    """
    text = text or ""
    segments = _ARGUMENT_SPLIT_RE.split(text)
    if len(segments) > 1:
        segments = segments[1:]
    else:
        logger.info("Parse miss: no 'Argument' label in model reply")
    return [parse_argument_block(seg) for seg in segments if seg.strip()]


def parse_language(text):
    """Split a leading "Language: X" line off a document summary."""
    text = text or ""
    match = _LANGUAGE_RE.match(text)
    if not match or not _clean(match.group(1)):
        logger.info("Parse miss: no leading 'Language' line in model reply")
        return DEFAULT_LANGUAGE, text.strip()
    summary = text[match.end():].strip()
    return _clean(match.group(1)), summary or text.strip()
