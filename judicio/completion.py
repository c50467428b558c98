# completion.py - single-call wrapper around the Groq chat completion API
import logging
from typing import Optional

import groq
from groq import Groq

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.1-8b-instant"


class CompletionServiceError(Exception):
    """The completion service could not be reached or refused the request."""


def extract_completion_text(completion) -> Optional[str]:
    """Content of the first choice, for SDK objects and plain dicts alike."""
    if completion is None:
        return None
    if isinstance(completion, dict):
        choices = completion.get("choices") or []
        if not choices:
            return None
        message = choices[0].get("message") or {}
        return message.get("content") or choices[0].get("text")

    choices = getattr(completion, "choices", None) or []
    if not choices:
        return None
    choice = choices[0]
    message = getattr(choice, "message", None)
    if isinstance(message, dict):
        return message.get("content")
    if message is not None:
        return getattr(message, "content", None)
    return getattr(choice, "text", None)


class CompletionClient:
    """
    Submits role-tagged messages to Groq and returns the first choice's text.

    The SDK client is built on first use so the app can start without an API key;
    calls made without one fail with CompletionServiceError. Retries are off by
    default (max_retries=0) and every call is bounded by `timeout` seconds.
    """

    def __init__(self, api_key=None, model=DEFAULT_MODEL, timeout=30.0, max_retries=0, client=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise CompletionServiceError("GROQ_API_KEY is not configured")
            self._client = Groq(api_key=self.api_key, timeout=self.timeout, max_retries=self.max_retries)
        return self._client

    def complete(self, messages, temperature=None, max_tokens=None) -> Optional[str]:
        """
        Returns the stripped reply, or None when the service answered without any
        content. Raises CompletionServiceError on connection, timeout, auth, quota
        or other API errors.
        """
        client = self._get_client()
        kwargs = {"model": self.model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            completion = client.chat.completions.create(**kwargs)
        except groq.APIError as e:
            raise CompletionServiceError(str(e) or e.__class__.__name__) from e

        text = extract_completion_text(completion)
        if not text or not text.strip():
            logger.warning("Completion returned no choices (model=%s)", self.model)
            return None
        return text.strip()
