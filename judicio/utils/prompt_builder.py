"""
Message lists for each Judicio capability.

Every builder returns [system, user] in that order. The system message carries the
persona and the reply format that response_parser expects; the user message carries
the caller's content.
"""

CHAT_SYSTEM = "You are Judicio, an AI legal advisor with multilingual support."

DOCUMENT_SYSTEM = """You are a multilingual document analysis AI.
- Detect the document's primary language.
- Start your reply with a single line of the form "Language: <language name>".
- Summarize the document in that same language.
- Identify 3 key legal or business clauses if available.
- If the document is not legal, summarize its main content."""

PREDICTION_SYSTEM = "You are an expert legal AI predicting outcomes based on evidence and precedent."

PREDICTION_TEMPLATE = """You are a legal outcome predictor.
Analyze this case and respond in the following structure:

Outcome: <Predicted verdict or result>
Reasoning: <Brief explanation in 3 sentences>
Confidence: <Confidence percentage>

Case Type: {case_type}
Jurisdiction: {jurisdiction}
Summary: {summary}"""

TIMELINE_SYSTEM = """You are a legal case timeline generator.
Write one event per line in the form "<date> - <event>", oldest first.
Do not add headings or commentary."""

TIMELINE_TEMPLATE = "Organize these facts into a chronological timeline:\n{case_facts}"

ARGUMENT_SYSTEM = """You are a legal strategist AI generating strong legal arguments.
Format every argument exactly as:
Argument: <short title>
Analysis: <analysis of the argument>
Strategy: <counter-strategy or response>"""

ARGUMENT_TEMPLATE = (
    "Generate 3 arguments {argument_type} the statement below with analysis and counter-strategy:\n\n"
    "{core_argument}"
)

# Generation parameters per capability; None means "use the service default"
CHAT_PARAMS = {"temperature": 0.7, "max_tokens": 1024}
DOCUMENT_PARAMS = {"temperature": 0.5, "max_tokens": 1500}
PREDICTION_PARAMS = {}
TIMELINE_PARAMS = {}
ARGUMENT_PARAMS = {}

DEFAULT_ARGUMENT_TYPE = "for"

# ---------------- example inputs (used only when explicitly requested) ----------------
EXAMPLE_CHAT_PROMPT = "Explain this legal concept simply."

EXAMPLE_CASE = {
    "caseType": "Breach of contract",
    "jurisdiction": "Delhi High Court, India",
    "summary": (
        "A software vendor delivered an inventory system four months late. "
        "The buyer withheld the final payment and terminated the contract, citing the "
        "delivery deadline clause. The vendor claims the delay was caused by the buyer's "
        "repeated change requests, documented by email."
    ),
}

EXAMPLE_CASE_FACTS = (
    "El 15 de enero de 2020 las partes firmaron un contrato de arrendamiento comercial. "
    "El 25 de marzo de 2020 comenzó el confinamiento y el local tuvo que cerrar. "
    "En junio de 2020 el arrendatario dejó de pagar la renta. "
    "El 3 de septiembre de 2020 el arrendador presentó una demanda de desahucio."
)

EXAMPLE_ARGUMENT = {
    "coreArgument": (
        "The tenant is entitled to withhold rent because the landlord failed to carry "
        "out essential repairs after written notice."
    ),
    "argumentType": DEFAULT_ARGUMENT_TYPE,
}


def _messages(system, user):
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_chat_messages(prompt):
    return _messages(CHAT_SYSTEM, prompt)


def build_document_messages(text):
    return _messages(DOCUMENT_SYSTEM, text)


def build_prediction_messages(case_type, jurisdiction, summary):
    user = PREDICTION_TEMPLATE.format(case_type=case_type, jurisdiction=jurisdiction, summary=summary)
    return _messages(PREDICTION_SYSTEM, user)


def build_timeline_messages(case_facts):
    return _messages(TIMELINE_SYSTEM, TIMELINE_TEMPLATE.format(case_facts=case_facts))


def build_argument_messages(core_argument, argument_type=DEFAULT_ARGUMENT_TYPE):
    user = ARGUMENT_TEMPLATE.format(
        argument_type=argument_type or DEFAULT_ARGUMENT_TYPE,
        core_argument=core_argument,
    )
    return _messages(ARGUMENT_SYSTEM, user)


def missing_fields(values: dict, required) -> list:
    """Names in `required` whose value is absent or blank."""
    return [name for name in required if not str(values.get(name) or "").strip()]


def fill_with_example(values: dict, example: dict) -> dict:
    """Copy of `values` restricted to the example's keys, blanks replaced by the example."""
    filled = {}
    for name, example_value in example.items():
        value = values.get(name)
        filled[name] = value if str(value or "").strip() else example_value
    return filled
