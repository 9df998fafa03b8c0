"""Summary: Remote classifier providers and their transport helpers.

Importance: Centralizes model access, retries, and reply parsing for classification.
Alternatives: Call provider SDKs directly in the analysis pipeline.
"""

from __future__ import annotations

import json
import logging
import re
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from triagedesk.categories import CATEGORIES
from triagedesk.classifier import ClassificationProvider, RuleBasedClassifier
from triagedesk.config import AppConfig
from triagedesk.models import Classification

logger = logging.getLogger(__name__)

T = TypeVar("T")

SYSTEM_PROMPT = (
    "You are a customer support triage assistant. "
    "Return concise reasoning and follow the JSON schema strictly."
)
JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


def build_prompt(message: str) -> list[dict[str, str]]:
    """Summary: Build chat messages asking the model for a JSON classification.

    Importance: Constrains output to the category vocabulary and a fixed schema.
    Alternatives: Use provider-native JSON mode or function calling.
    """

    user = (
        'Return ONLY valid JSON with keys: "primaryCategory" (string), '
        '"categories" (array of 1-3 strings), "confidence" (0-1), "reasoning" (string).\n\n'
        f"Allowed categories: {', '.join(CATEGORIES)}\n\n"
        f'Message: """{message}"""'
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def parse_json_from_text(text: str) -> dict[str, Any] | None:
    """Summary: Extract a JSON object from a model reply.

    Importance: Models often wrap JSON in prose or code fences.
    Alternatives: Reject any reply that is not pure JSON.
    """

    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        match = JSON_BLOCK.search(text or "")
        if not match:
            return None
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None


def with_retries(
    operation: Callable[[], T],
    retries: int,
    backoff_ms: int,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Summary: Run an operation, retrying failures with a doubling delay.

    Importance: Absorbs transient network errors before falling back.
    Alternatives: Use a retry library such as tenacity.
    """

    attempt = 0
    while True:
        try:
            return operation()
        except Exception:
            if attempt >= retries:
                raise
            delay_ms = backoff_ms * 2**attempt
            logger.debug("Classifier attempt %s failed, retrying in %sms.", attempt + 1, delay_ms)
            sleep(delay_ms / 1000)
            attempt += 1


def _post_json(url: str, payload: dict[str, Any], headers: dict[str, str], timeout: int) -> Any:
    request = urllib.request.Request(
        url=url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json", **headers},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return json.loads(response.read().decode("utf-8"))
    except urllib.error.URLError as exc:
        raise RuntimeError(f"Request to {url} failed: {exc}") from exc
    except ValueError as exc:
        raise RuntimeError(f"Invalid JSON from {url}") from exc


class GroqProvider(ClassificationProvider):
    """Summary: Classifier backed by Groq's OpenAI-compatible chat completions API.

    Importance: Gives higher-quality categorization than keyword rules.
    Alternatives: Use the OpenAI API or a local Ollama model.
    """

    def __init__(self, api_key: str, model: str, base_url: str, timeout: int = 30) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def classify(self, message: str) -> Classification:
        """Summary: Ask the model for a classification and normalize its reply.

        Importance: Invalid categories are dropped and missing fields get defaults.
        Alternatives: Trust the model output as-is.
        """

        raw = _post_json(
            f"{self._base_url}/chat/completions",
            {"model": self._model, "messages": build_prompt(message), "temperature": 0.2},
            {"Authorization": f"Bearer {self._api_key}"},
            self._timeout,
        )
        try:
            content = str(raw["choices"][0]["message"]["content"] or "").strip()
        except (KeyError, IndexError, TypeError) as exc:
            raise RuntimeError("Unexpected completion response shape") from exc
        parsed = parse_json_from_text(content)
        if parsed is None:
            raise RuntimeError("Invalid JSON from model")
        return Classification.from_payload({**parsed, "model": self._model})


class RemoteTriageProvider(ClassificationProvider):
    """Summary: Classifier that delegates to another triage server's /api/triage.

    Importance: Lets several front ends share one classification backend and cache.
    Alternatives: Embed provider credentials in every client.
    """

    def __init__(self, base_url: str, timeout: int = 30) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def classify(self, message: str) -> Classification:
        payload = _post_json(
            f"{self._base_url}/api/triage", {"message": message}, {}, self._timeout
        )
        if not isinstance(payload, dict):
            raise RuntimeError("Invalid triage response")
        return Classification.from_payload(payload)


@dataclass(frozen=True)
class ClassifierFactory:
    """Summary: Select the primary classifier from configuration.

    Importance: Keeps provider selection logic centralized.
    Alternatives: Wire providers manually at each entrypoint.
    """

    config: AppConfig

    def build(self) -> ClassificationProvider:
        """Summary: Construct the configured classifier.

        Importance: Fails fast when a provider is selected without its credentials.
        Alternatives: Silently fall back to the rule-based classifier.
        """

        provider = self.config.classifier_provider
        if provider == "groq":
            if not self.config.groq_api_key:
                raise ValueError("GROQ_API_KEY is required for groq provider")
            return GroqProvider(
                self.config.groq_api_key,
                self.config.groq_model,
                self.config.groq_base_url,
                self.config.request_timeout_seconds,
            )
        if provider == "remote":
            return RemoteTriageProvider(
                self.config.triage_api_url, self.config.request_timeout_seconds
            )
        if provider == "mock":
            return RuleBasedClassifier()
        raise ValueError(f"Unknown classifier provider: {provider}")
