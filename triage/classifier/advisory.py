"""
Advisory Classifier - LLM second opinion on borderline notifications.

After the heuristic scorer runs, a small LLM can be asked whether the
notification deserves attention given who sent it and what the user likes.
Its verdict is advisory: the reconciler decides whether to act on it.

Token budget: ~200 tokens per call (prompt + short JSON reply).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..common.config import AdvisoryConfig, LLMConfig
from ..common.errors import AdvisoryUnavailable
from ..common.llm_client import LLMClient
from ..common.llm_utils import coerce_bool, coerce_unit_float, parse_llm_json

logger = logging.getLogger("triage.classifier.advisory")

CLASSIFIER_POLICY = """You are a notification classifier. Analyze the notification and determine if it should be IMPORTANT or SILENT.

Respond ONLY with valid JSON in this format:
{"important": true/false, "reason": "brief explanation", "confidence": 0.0-1.0}"""

# Confidence given to verdicts read from free text instead of JSON
TEXT_FALLBACK_CONFIDENCE = 0.5


@dataclass
class AdvisoryVerdict:
    """Result of one advisory classification."""
    important: bool
    reason: str
    confidence: float
    raw_response: Optional[str] = None


def default_preference_hint(content_id: Optional[str], preference_score: int = 0) -> str:
    return f"User likes: {preference_score} for {content_id}"


def build_prompt(notification_text: str, content_id: Optional[str], preference_hint: str) -> str:
    lines = [f'Notification: "{notification_text[:500]}"']
    if content_id:
        lines.append(f"Channel/Sender: {content_id}")
    if preference_hint:
        lines.append(f"User Preferences: {preference_hint}")
    return "\n".join(lines)


def parse_verdict(raw: str) -> AdvisoryVerdict:
    """
    Parse an LLM reply into a verdict.

    JSON replies are read field by field. Replies without JSON fall back to a
    text reading: "important" present and "not important" absent.
    """
    data = parse_llm_json(raw)
    if data:
        return AdvisoryVerdict(
            important=coerce_bool(data.get("important", False)),
            reason=str(data.get("reason", "")),
            confidence=coerce_unit_float(data.get("confidence")),
            raw_response=raw,
        )

    lowered = raw.lower()
    return AdvisoryVerdict(
        important="important" in lowered and "not important" not in lowered,
        reason="Parsed from text response",
        confidence=TEXT_FALLBACK_CONFIDENCE,
        raw_response=raw,
    )


class AdvisoryClassifier:
    """
    LLM-backed implementation of the advisory classify operation.

    Every failure surfaces as AdvisoryUnavailable; the caller treats it as
    "no opinion" and keeps the heuristic score.
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        timeout: float = 5.0,
        max_tokens: int = 200,
    ):
        self._llm = llm_client
        self._timeout = timeout
        self._max_tokens = max_tokens

    @classmethod
    def from_config(cls, llm_config: LLMConfig, advisory_config: AdvisoryConfig) -> "AdvisoryClassifier":
        return cls(
            llm_client=LLMClient.from_config(llm_config),
            timeout=advisory_config.timeout,
            max_tokens=advisory_config.max_tokens,
        )

    @property
    def is_available(self) -> bool:
        return self._llm is not None and self._llm.is_available

    def classify(
        self,
        notification_text: str,
        content_id: Optional[str],
        preference_hint: str = "",
    ) -> AdvisoryVerdict:
        """
        Ask the LLM whether a notification is important.

        Args:
            notification_text: Title and body of the notification
            content_id: Resolved sender/channel, if any
            preference_hint: Free-text summary of the user's preference

        Returns:
            AdvisoryVerdict

        Raises:
            AdvisoryUnavailable: no client, SDK error, timeout or empty reply
        """
        if not self.is_available:
            raise AdvisoryUnavailable("LLM client unavailable")

        prompt = build_prompt(notification_text, content_id, preference_hint)
        try:
            raw = self._llm.generate(
                prompt,
                system=CLASSIFIER_POLICY,
                max_tokens=self._max_tokens,
                timeout=self._timeout,
            )
        except Exception as e:
            raise AdvisoryUnavailable(f"LLM call failed: {e}") from e

        if not raw or not raw.strip():
            raise AdvisoryUnavailable("Empty LLM response")

        verdict = parse_verdict(raw)
        logger.debug(
            "Advisory verdict for %s: important=%s confidence=%.2f (%s)",
            content_id, verdict.important, verdict.confidence, verdict.reason,
        )
        return verdict
