"""
Exercise Question Generator
Builds multiple-choice vocabulary questions and picks the exercise type
that fits a learner's mastery of the word.

Question types:
- word-meaning-match: show the word, pick its meaning
- meaning-word-match: show the meaning, pick the word
- sentence-completion: fill the blank in the example sentence
- synonym-match: pick a synonym of the word
- context-usage: pick the word that fits a described situation
"""
import logging
import random
import re
from typing import Iterable, Optional

from app.core.exceptions import ValidationError
from app.models.vocabulary import ExerciseQuestion, ExerciseType, MasteryLevel, VocabularyItem


logger = logging.getLogger(__name__)

BLANK = "______"


def select_exercise_type(
    item: VocabularyItem,
    accuracy: float,
    rng: Optional[random.Random] = None
) -> ExerciseType:
    """
    Pick an exercise type for an item based on its mastery and the
    learner's recent accuracy.

    Args:
        item: Vocabulary item to practice
        accuracy: Learner's recent accuracy (0-1)
        rng: Random source, defaults to the module random

    Returns:
        Selected ExerciseType
    """
    if accuracy is None or not 0 <= accuracy <= 1:
        raise ValidationError("Accuracy must be between 0 and 1", field="accuracy")

    rng = rng or random.Random()
    mastery = int(item.mastery_level)

    # New words start with recognition
    if mastery == MasteryLevel.NEW or accuracy < 0.6:
        return rng.choice([ExerciseType.WORD_MEANING_MATCH, ExerciseType.MEANING_WORD_MATCH])

    if mastery == MasteryLevel.LEARNING or accuracy < 0.8:
        candidates = [ExerciseType.SENTENCE_COMPLETION, ExerciseType.CONTEXT_USAGE]
    else:
        candidates = [ExerciseType.CONTEXT_USAGE, ExerciseType.SENTENCE_COMPLETION]

    if item.synonyms:
        candidates.append(ExerciseType.SYNONYM_MATCH)

    return rng.choice(candidates)


def exercise_type_from_question_id(question_id: str) -> Optional[ExerciseType]:
    """Recover the exercise type embedded in a generated question id."""
    for exercise_type in ExerciseType:
        if f"-{exercise_type.value}-" in question_id:
            return exercise_type
    return None


class ExerciseGenerator:
    """
    Generates exercise questions from a vocabulary item and a pool of the
    learner's other items used as distractors.

    Guarantees for every question:
    - exactly one correct answer, always among the options
    - up to max_distractors distinct distractors
    - no distractor equals the correct answer (case-insensitive)
    - the target item never supplies a distractor
    """

    def __init__(self, max_distractors: int = 3, rng: Optional[random.Random] = None):
        self.max_distractors = max_distractors
        self.rng = rng or random.Random()

        self._builders = {
            ExerciseType.WORD_MEANING_MATCH: self._word_meaning_match,
            ExerciseType.MEANING_WORD_MATCH: self._meaning_word_match,
            ExerciseType.SENTENCE_COMPLETION: self._sentence_completion,
            ExerciseType.SYNONYM_MATCH: self._synonym_match,
            ExerciseType.CONTEXT_USAGE: self._context_usage,
        }

    def generate(
        self,
        item: VocabularyItem,
        exercise_type: ExerciseType,
        pool: Iterable[VocabularyItem] = ()
    ) -> ExerciseQuestion:
        """
        Generate one question of the given type for an item.

        Args:
            item: Target vocabulary item
            exercise_type: Type of question to build
            pool: Other items of the learner, used for distractors

        Returns:
            ExerciseQuestion with shuffled options
        """
        if not item.word or not item.word.strip():
            raise ValidationError("Vocabulary item has an empty word", field="word")

        exercise_type = ExerciseType(exercise_type)
        others = [
            candidate for candidate in pool
            if candidate.id != item.id and candidate.word.strip().lower() != item.word.strip().lower()
        ]

        question = self._builders[exercise_type](item, others)
        logger.debug(f"Generated {question.type} question {question.id} for '{item.word}'")
        return question

    def generate_adaptive(
        self,
        item: VocabularyItem,
        accuracy: float,
        pool: Iterable[VocabularyItem] = ()
    ) -> ExerciseQuestion:
        """Select the exercise type for the item, then generate the question."""
        exercise_type = select_exercise_type(item, accuracy, self.rng)
        return self.generate(item, exercise_type, pool)

    # ==================== QUESTION TYPES ====================

    def _word_meaning_match(self, item: VocabularyItem, others: list[VocabularyItem]) -> ExerciseQuestion:
        correct = item.meaning or item.word
        distractors = self._pick_distractors(correct, [other.meaning for other in others])

        return self._build(
            item,
            ExerciseType.WORD_MEANING_MATCH,
            question=f'What does "{item.word}" mean?',
            correct=correct,
            distractors=distractors,
            explanation=item.usage_notes or f"{item.word}: {item.meaning}"
        )

    def _meaning_word_match(self, item: VocabularyItem, others: list[VocabularyItem]) -> ExerciseQuestion:
        distractors = self._pick_distractors(item.word, [other.word for other in others])

        return self._build(
            item,
            ExerciseType.MEANING_WORD_MATCH,
            question=f'Which word means "{item.meaning}"?',
            correct=item.word,
            distractors=distractors,
            explanation=item.usage_notes or f"{item.word}: {item.meaning}"
        )

    def _sentence_completion(self, item: VocabularyItem, others: list[VocabularyItem]) -> ExerciseQuestion:
        example = item.example or f"This is an example with {item.word}."
        pattern = re.compile(rf"\b{re.escape(item.word)}\b", re.IGNORECASE)
        sentence = pattern.sub(BLANK, example)
        if BLANK not in sentence:
            sentence = f"{example} ({BLANK})"

        # Same part of speech first, then the rest of the pool
        same_pos = [
            other.word for other in others
            if item.part_of_speech and other.part_of_speech == item.part_of_speech
        ]
        rest = [other.word for other in others if other.word not in same_pos]
        distractors = self._pick_distractors(item.word, same_pos)
        if len(distractors) < self.max_distractors:
            taken = distractors + [item.word]
            distractors += self._pick_distractors(
                item.word,
                rest,
                limit=self.max_distractors - len(distractors),
                exclude=taken
            )

        return self._build(
            item,
            ExerciseType.SENTENCE_COMPLETION,
            question=f"Fill in the blank: {sentence}",
            correct=item.word,
            distractors=distractors,
            explanation=f"Complete sentence: {example}"
        )

    def _synonym_match(self, item: VocabularyItem, others: list[VocabularyItem]) -> ExerciseQuestion:
        if not item.synonyms:
            return self._word_meaning_match(item, others)

        correct = item.synonyms[0]
        # Other synonyms of the target would also be right answers
        excluded = item.synonyms + [item.word]
        distractors = self._pick_distractors(
            correct,
            [other.word for other in others],
            exclude=excluded
        )

        return self._build(
            item,
            ExerciseType.SYNONYM_MATCH,
            question=f'Which of the following is a synonym of "{item.word}"?',
            correct=correct,
            distractors=distractors,
            explanation=f"Synonyms of {item.word} include: {', '.join(item.synonyms)}"
        )

    def _context_usage(self, item: VocabularyItem, others: list[VocabularyItem]) -> ExerciseQuestion:
        meaning = item.meaning
        contexts = [
            f'Which word would you use to express "{meaning}"?',
            f'When you want to say "{meaning}", which word is appropriate?',
            "Choose the most suitable word for the context below:\n"
            + (item.example or f'Need a word that means "{meaning}"')
        ]
        distractors = self._pick_distractors(item.word, [other.word for other in others])

        return self._build(
            item,
            ExerciseType.CONTEXT_USAGE,
            question=self.rng.choice(contexts),
            correct=item.word,
            distractors=distractors,
            explanation=item.usage_notes or f"{item.word} fits this context"
        )

    # ==================== HELPERS ====================

    def _pick_distractors(
        self,
        correct: str,
        candidates: Iterable[str],
        limit: Optional[int] = None,
        exclude: Iterable[str] = ()
    ) -> list[str]:
        """Sample distinct, non-empty candidates that differ from the correct answer."""
        limit = self.max_distractors if limit is None else limit
        blocked = {correct.strip().lower()} | {value.strip().lower() for value in exclude if value}

        unique = []
        seen = set()
        for candidate in candidates:
            if not candidate or not candidate.strip():
                continue
            key = candidate.strip().lower()
            if key in blocked or key in seen:
                continue
            seen.add(key)
            unique.append(candidate.strip())

        if len(unique) <= limit:
            return unique
        return self.rng.sample(unique, limit)

    def _build(
        self,
        item: VocabularyItem,
        exercise_type: ExerciseType,
        question: str,
        correct: str,
        distractors: list[str],
        explanation: Optional[str]
    ) -> ExerciseQuestion:
        options = [correct] + distractors
        self.rng.shuffle(options)

        return ExerciseQuestion(
            id=f"{item.id}-{exercise_type.value}-{self.rng.getrandbits(48):012x}",
            type=exercise_type,
            vocabulary_id=item.id,
            word=item.word,
            question=question,
            options=options,
            correct_answer=correct,
            explanation=explanation
        )
