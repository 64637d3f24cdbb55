"""
Question Augmentation
Optional AI capability that pre-builds exercise questions for a batch of
vocabulary items. Results are best-effort; the local generator fills gaps.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import AugmentationUnavailable
from app.models.vocabulary import ExerciseQuestion, ExerciseType, VocabularyItem
from app.services.azure_openai_service import AzureOpenAIService

logger = logging.getLogger(__name__)


class QuestionAugmenter(ABC):
    """Produces ready-made questions for vocabulary items"""

    @abstractmethod
    async def generate_questions(self, items: list[VocabularyItem]) -> list[ExerciseQuestion]:
        """
        Build questions for some or all of the given items.

        Raises:
            AugmentationUnavailable: If the service cannot produce questions
        """
        pass


class NullQuestionAugmenter(QuestionAugmenter):
    """Augmenter that never produces questions"""

    async def generate_questions(self, items: list[VocabularyItem]) -> list[ExerciseQuestion]:
        return []


class OpenAIQuestionAugmenter(QuestionAugmenter):
    """Augmenter backed by Azure OpenAI"""

    def __init__(self, openai_service: Optional[AzureOpenAIService] = None):
        self.openai_service = openai_service or AzureOpenAIService()

    async def generate_questions(self, items: list[VocabularyItem]) -> list[ExerciseQuestion]:
        if not items:
            return []

        raw_questions = await self.openai_service.generate_exercise_questions([
            {
                "word": item.word,
                "definition": item.meaning,
                "example": item.example,
                "part_of_speech": item.part_of_speech
            }
            for item in items
        ])

        by_word = {item.word.strip().lower(): item for item in items}
        questions = []
        for raw in raw_questions:
            question = self._to_question(raw, by_word)
            if question is not None:
                questions.append(question)

        logger.info(f"AI produced {len(questions)} usable questions for {len(items)} items")
        return questions

    def _to_question(self, raw: dict, by_word: dict) -> Optional[ExerciseQuestion]:
        """Convert one raw AI answer, or None if it does not fit a known item."""
        if not isinstance(raw, dict):
            return None

        item = by_word.get(str(raw.get("word", "")).strip().lower())
        if item is None:
            return None

        try:
            exercise_type = ExerciseType(raw.get("type", ExerciseType.WORD_MEANING_MATCH.value))
        except (ValueError, TypeError):
            exercise_type = ExerciseType.WORD_MEANING_MATCH

        raw_options = raw.get("options")
        if not isinstance(raw_options, list):
            return None
        options = [str(option) for option in raw_options if isinstance(option, (str, int, float))]
        if not options or not raw.get("question") or not raw.get("correct_answer"):
            return None

        try:
            return ExerciseQuestion(
                id=f"{item.id}-{exercise_type.value}-ai{uuid.uuid4().hex[:10]}",
                type=exercise_type,
                vocabulary_id=item.id,
                word=item.word,
                question=str(raw["question"]),
                options=options,
                correct_answer=str(raw["correct_answer"]),
                explanation=raw.get("explanation"),
                generated_by_ai=True
            )
        except (PydanticValidationError, TypeError) as e:
            logger.warning(f"Dropping malformed AI question for '{item.word}': {e}")
            return None


def build_question_augmenter(enabled: bool, openai_service: Optional[AzureOpenAIService] = None) -> QuestionAugmenter:
    """Pick the augmenter for the current configuration."""
    if not enabled:
        return NullQuestionAugmenter()
    return OpenAIQuestionAugmenter(openai_service)


__all__ = [
    "QuestionAugmenter",
    "NullQuestionAugmenter",
    "OpenAIQuestionAugmenter",
    "AugmentationUnavailable",
    "build_question_augmenter"
]
