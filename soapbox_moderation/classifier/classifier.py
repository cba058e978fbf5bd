"""Content classifier with learning integration.

Builds a prompt from the taxonomy, the lessons learned from recent moderator
corrections and the content itself, asks the completion service for a JSON
verdict, and validates every field of the answer. Any failure to get a
trustworthy answer resolves to a conservative fail-safe result that sends
the content to review.
"""

import asyncio
import json
import logging
import math
import re
from typing import Any, Iterable, Optional

import anthropic

from soapbox_moderation.classifier.prompt import PromptBuilder
from soapbox_moderation.config import AppConfig, get_config
from soapbox_moderation.exceptions import CompletionError, TrainingStoreError
from soapbox_moderation.learning.context_builder import ContextBuilder
from soapbox_moderation.learning.training_store import TrainingStore
from soapbox_moderation.models.classification import ClassificationResult
from soapbox_moderation.services.anthropic_client import AnthropicClient, CompletionRequest
from soapbox_moderation.taxonomy import coerce_action, coerce_category, coerce_priority

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("flagged", "priority", "category", "confidence", "actionRequired")
DEFAULT_REASON = "Content analysis"

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)

# Failures of the completion call that must never read as "safe" content
COMPLETION_FAILURES = (
    anthropic.AnthropicError,
    CompletionError,
    TrainingStoreError,
    OSError,
)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model may wrap its JSON in."""
    content = text.strip()

    match = _FENCED_BLOCK.search(content)
    if match:
        return match.group(1).strip()

    # Opening fence without a closing one
    if content.startswith("```"):
        content = content[3:]
        if content.lower().startswith("json"):
            content = content[4:]
    return content.strip()


def clamp_confidence(value: Any) -> float:
    """Clamp a model-supplied confidence into [0, 1]. Unusable values give 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0.0
    if not isinstance(value, (int, float)) or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


def _coerce_flagged(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _coerce_violations(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def parse_response(raw: str) -> ClassificationResult:
    """Parse and sanitize the model's response.

    Unparsable JSON or a missing required field gives the fail-safe result.
    Out-of-vocabulary enum values are coerced to conservative defaults and
    confidence is clamped.

    Args:
        raw: Raw completion text

    Returns:
        A ClassificationResult that always satisfies the field invariants
    """
    try:
        data = json.loads(strip_code_fences(raw))
    except (json.JSONDecodeError, TypeError, AttributeError) as e:
        logger.error(f"Failed to parse classification response: {e}")
        return ClassificationResult.fail_safe()

    if not isinstance(data, dict):
        logger.error(f"Classification response is not a JSON object: {type(data).__name__}")
        return ClassificationResult.fail_safe()

    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        logger.error(f"Classification response missing fields: {', '.join(missing)}")
        return ClassificationResult.fail_safe()

    priority = coerce_priority(data["priority"])
    category = coerce_category(data["category"])
    action = coerce_action(data["actionRequired"])

    if priority.value != data["priority"] or category.value != data["category"]:
        logger.warning(
            f"Coerced classification enums: priority={data['priority']!r} -> {priority.value}, "
            f"category={data['category']!r} -> {category.value}"
        )

    reason = data.get("reason")
    learning_note = data.get("learningNote")

    return ClassificationResult(
        flagged=_coerce_flagged(data["flagged"]),
        priority=priority,
        category=category,
        violations=_coerce_violations(data.get("violations")),
        reason=reason if isinstance(reason, str) else DEFAULT_REASON,
        confidence=clamp_confidence(data["confidence"]),
        action_required=action,
        learning_note=learning_note if isinstance(learning_note, str) else "",
    )


class ModerationClassifier:
    """Classifies content with context learned from moderator corrections.

    Each call takes its own snapshot of the training store, so concurrent
    calls share no mutable state and may see slightly different context.
    """

    def __init__(
        self,
        completion_client: Optional[AnthropicClient] = None,
        context_builder: Optional[ContextBuilder] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        config: Optional[AppConfig] = None,
    ):
        """Initialize the classifier.

        Args:
            completion_client: Object with ``complete(CompletionRequest) -> str``.
                If None, creates an AnthropicClient.
            context_builder: Builder over the service's training store. If None,
                uses a private empty store and the classifier cannot learn.
            prompt_builder: Prompt assembly stages
            config: Application configuration. If None, loads from environment.
        """
        self.config = config or get_config()
        self.client = completion_client or AnthropicClient(self.config.anthropic)
        if context_builder is None:
            logger.warning(
                "No context builder given; classifier uses a private empty training "
                "store and will not learn from moderator decisions"
            )
            context_builder = ContextBuilder(
                TrainingStore(),
                window=self.config.learning.context_window,
                excerpt_length=self.config.learning.excerpt_length,
            )
        self.context_builder = context_builder
        self.prompt_builder = prompt_builder or PromptBuilder(
            temperature=self.config.anthropic.temperature
        )

    def build_request(self, content: str, content_type: str) -> CompletionRequest:
        """Build the completion request from a fresh context snapshot."""
        context = self.context_builder.build()
        return self.prompt_builder.build(content, content_type, context)

    def classify(self, content: str, content_type: str = "post") -> ClassificationResult:
        """Classify one piece of content.

        Args:
            content: Text to classify
            content_type: post, comment, discussion, prayer, ...

        Returns:
            Sanitized ClassificationResult, or the fail-safe result if the
            completion service could not be used
        """
        try:
            request = self.build_request(content, content_type)
            raw = self.client.complete(request)
        except COMPLETION_FAILURES as e:
            logger.error(f"AI analysis with learning failed for '{content[:50]}': {e}")
            return ClassificationResult.fail_safe()
        except Exception:
            # Never fail open, whatever the completion client raised
            logger.exception(f"Unexpected error classifying '{content[:50]}'")
            return ClassificationResult.fail_safe()

        result = parse_response(raw)

        logger.info(
            f"Classified {content_type} '{content[:50]}' as {result.priority.value}/"
            f"{result.category.value} (confidence: {result.confidence:.2f}, "
            f"action: {result.action_required.value})"
        )
        return result

    async def aclassify(
        self,
        content: str,
        content_type: str = "post",
        timeout: Optional[float] = None,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> ClassificationResult:
        """Classify without blocking the event loop.

        A timeout is treated exactly like a malformed response. The abandoned
        call's result is discarded.

        Args:
            content: Text to classify
            content_type: post, comment, discussion, prayer, ...
            timeout: Seconds to wait; defaults to MODERATION_TIMEOUT_SECONDS
            semaphore: Concurrency slot held until the worker thread finishes,
                including after a timeout
        """
        timeout = self.config.anthropic.timeout_seconds if timeout is None else timeout

        if semaphore is not None:
            await semaphore.acquire()
        worker = asyncio.ensure_future(asyncio.to_thread(self.classify, content, content_type))
        if semaphore is not None:
            worker.add_done_callback(lambda _: semaphore.release())

        try:
            return await asyncio.wait_for(asyncio.shield(worker), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Classification timed out after {timeout}s for '{content[:50]}'")
            return ClassificationResult.fail_safe()

    async def classify_many(
        self,
        items: Iterable[tuple[str, str]],
        max_concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> list[ClassificationResult]:
        """Classify many (content, content_type) pairs concurrently.

        At most ``max_concurrency`` completion calls are in flight, counting
        calls abandoned after a timeout. Results are returned in input order.
        """
        limit = max_concurrency or self.config.max_concurrent_classifications
        semaphore = asyncio.Semaphore(limit)

        return await asyncio.gather(
            *[
                self.aclassify(content, content_type, timeout=timeout, semaphore=semaphore)
                for content, content_type in items
            ]
        )
