"""Prompt complexity classification.

Asks an external model to place a prompt on a 5-point complexity
scale and validates the answer. The model is reached through LiteLLM,
so any provider LiteLLM supports can act as the classifier (the
default is ``gpt-4o``).

Failures are terminal. If the call fails, the reply has no JSON
object, or the label is not one of the five known levels, classify()
raises ClassificationError - there is no guessed fallback label.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from promptwatt.routing.extraction import ExtractionError, extract_json

logger = logging.getLogger(__name__)


class ComplexityLabel(str, Enum):
    """Closed, ordered set of complexity levels (least to most complex)."""
    VERY_SIMPLE = "Very Simple"     # Factual lookups, definitions
    SIMPLE = "Simple"               # Minimal context, basic explanations
    MODERATE = "Moderate"           # Some reasoning, multi-step instructions
    COMPLEX = "Complex"             # Significant reasoning, creative tasks
    VERY_COMPLEX = "Very Complex"   # Advanced, specialized, multi-step solving

    @property
    def rank(self) -> int:
        return list(ComplexityLabel).index(self)

    def __lt__(self, other):
        if not isinstance(other, ComplexityLabel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ComplexityLabel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ComplexityLabel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ComplexityLabel):
            return NotImplemented
        return self.rank >= other.rank


@dataclass(frozen=True)
class ComplexityClassification:
    """A validated classification. ``rationale`` is advisory text only."""
    label: ComplexityLabel
    rationale: str = ""


class ClassificationError(Exception):
    """The prompt could not be classified."""


SYSTEM_PROMPT = """You are the Model Selector agent in a two-agent architecture for intelligent model selection.
Your task is to analyze the given prompt and determine its complexity level.

Classify the prompt on a 5-point scale:
1. Very Simple: Basic factual questions, simple definitions, or straightforward information retrieval
2. Simple: Questions requiring minimal context, basic explanations, or simple instructions
3. Moderate: Questions requiring some reasoning, explanations with context, or multi-step instructions
4. Complex: Problems requiring significant reasoning, complex explanations, or creative tasks
5. Very Complex: Advanced reasoning, specialized knowledge, or multi-step problem solving

Return a JSON object with the following fields:
- complexity: The complexity level as a string (one of: "Very Simple", "Simple", "Moderate", "Complex", "Very Complex")
- reasoning: A brief explanation of why you classified it at this complexity level (1-2 sentences)

Format your response as a valid JSON object without any markdown formatting or code blocks."""

# (model, messages) -> reply text
CompletionFn = Callable[[str, list[dict[str, str]]], Awaitable[str]]


async def litellm_complete(model: str, messages: list[dict[str, str]]) -> str:
    """Default completion function backed by ``litellm.acompletion``."""
    try:
        import litellm
    except ImportError:
        raise ClassificationError(
            "LiteLLM not available - install with: pip install litellm")

    response = await litellm.acompletion(model=model, messages=messages)
    return response.choices[0].message.content or ""


def parse_classification(data: dict[str, Any]) -> ComplexityClassification:
    """Validate an extracted object against the closed label set."""
    raw_label = data.get("complexity")
    try:
        label = ComplexityLabel(raw_label)
    except ValueError:
        raise ClassificationError(f"Invalid complexity level: {data!r}")

    rationale = data.get("reasoning", "")
    if not isinstance(rationale, str):
        rationale = str(rationale)
    return ComplexityClassification(label=label, rationale=rationale.strip())


class ComplexityClassifier:
    """Classifies prompt complexity through an external model.

    Usage:
        classifier = ComplexityClassifier(model="gpt-4o")
        result = await classifier.classify("Prove that sqrt(2) is irrational")
        # result.label == ComplexityLabel.COMPLEX
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        completion: CompletionFn | None = None,
    ):
        self.model = model
        self._complete = completion or litellm_complete

    async def classify(self, prompt: str) -> ComplexityClassification:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        try:
            text = await self._complete(self.model, messages)
        except ClassificationError:
            raise
        except Exception as e:
            logger.error(f"Classifier call failed ({self.model}): {e}")
            raise ClassificationError(f"Classifier call failed: {e}") from e

        logger.debug(f"Raw classifier response: {text}")

        try:
            data = extract_json(text or "")
        except ExtractionError as e:
            logger.error(f"Failed to parse analysis result: {e} (fragment={e.fragment!r})")
            raise ClassificationError(f"{e}: {e.fragment!r}") from e

        return parse_classification(data)
