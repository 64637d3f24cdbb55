"""
Spaced Repetition System (SRS) Algorithm
Implementation of the SM-2 algorithm used to reschedule vocabulary reviews.

The SM-2 algorithm calculates optimal review intervals based on:
- Performance rating of the answer (0-5 scale)
- Ease factor (difficulty multiplier)
- Number of consecutive successful repetitions

Performance Rating Scale:
0 - Incorrect answer
1 - Correct, but slow and marked very hard by the learner
2 - Correct, but much slower than the target time
3 - Correct response at normal speed
4 - Correct response, noticeably faster than the target time
5 - Correct response with no hesitation
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.core.exceptions import ValidationError


@dataclass(frozen=True)
class SRSConfig:
    """Scheduling constants. Built once and passed to SRSAlgorithm."""
    initial_ease_factor: float = 2.5
    min_ease_factor: float = 1.3
    max_ease_factor: float = 3.0
    interval_modifier: float = 1.0
    first_interval: int = 1
    second_interval: int = 6
    max_interval: int = 365
    target_response_time: float = 10.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SRSConfig":
        settings = settings or get_settings()
        return cls(
            initial_ease_factor=settings.SRS_INITIAL_EASE_FACTOR,
            min_ease_factor=settings.SRS_MIN_EASE_FACTOR,
            max_ease_factor=settings.SRS_MAX_EASE_FACTOR,
            interval_modifier=settings.SRS_INTERVAL_MODIFIER,
            first_interval=settings.SRS_INITIAL_INTERVAL_DAYS,
            second_interval=settings.SRS_SECOND_INTERVAL_DAYS,
            max_interval=settings.SRS_MAX_INTERVAL_DAYS,
            target_response_time=settings.SRS_TARGET_RESPONSE_TIME_SECONDS
        )


class SRSResult(BaseModel):
    """Result of SRS calculation"""
    ease_factor: float
    interval: int
    repetitions: int
    next_review: date
    performance_rating: int
    is_correct: bool


class SRSAlgorithm:
    """
    SM-2 Spaced Repetition Algorithm

    The algorithm adjusts review intervals based on performance:
    - Correct answers (rating >= 3) grow the interval
    - Incorrect answers reset to the first interval and lower the ease factor
    - Ease factor adjusts based on the rating and stays within bounds

    Intervals: first_interval, second_interval, then
    previous_interval * previous_ease_factor * interval_modifier,
    capped at max_interval.
    """

    def __init__(self, config: Optional[SRSConfig] = None):
        self.config = config or SRSConfig()

    def _clamp_ease(self, ease_factor: float) -> float:
        return max(self.config.min_ease_factor, min(self.config.max_ease_factor, ease_factor))

    def calculate(
        self,
        ease_factor: float,
        interval: int,
        repetitions: int,
        performance_rating: int,
        today: Optional[date] = None
    ) -> SRSResult:
        """
        Calculate the next review based on SM-2 algorithm.

        Args:
            ease_factor: Current ease factor
            interval: Current interval in days
            repetitions: Current consecutive successful reviews
            performance_rating: Performance rating (0-5)
            today: Reference date, defaults to date.today()

        Returns:
            SRSResult with updated scheduling state

        Raises:
            ValidationError: If the rating is outside 0..5
        """
        if isinstance(performance_rating, bool) or not isinstance(performance_rating, int):
            raise ValidationError("Performance rating must be an integer", field="performance_rating")
        if not 0 <= performance_rating <= 5:
            raise ValidationError("Performance rating must be between 0 and 5", field="performance_rating")
        if repetitions < 0 or interval < 0:
            raise ValidationError("Interval and repetitions must be non-negative", field="repetitions")

        today = today or date.today()
        is_correct = performance_rating >= 3

        if is_correct:
            repetitions += 1
            if repetitions == 1:
                interval = self.config.first_interval
            elif repetitions == 2:
                interval = self.config.second_interval
            else:
                # Uses the ease factor from before this review
                interval = round(interval * ease_factor * self.config.interval_modifier)

            # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
            gap = 5 - performance_rating
            ease_factor = ease_factor + (0.1 - gap * (0.08 + gap * 0.02))
        else:
            repetitions = 0
            interval = self.config.first_interval
            ease_factor = ease_factor - 0.2

        ease_factor = round(self._clamp_ease(ease_factor), 2)
        interval = min(interval, self.config.max_interval)

        return SRSResult(
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            next_review=today + timedelta(days=interval),
            performance_rating=performance_rating,
            is_correct=is_correct
        )

    def calculate_performance_rating(
        self,
        is_correct: bool,
        response_time: float,
        target_time: Optional[float] = None,
        user_difficulty: Optional[int] = None
    ) -> int:
        """
        Derive a 0-5 performance rating from correctness, speed and the
        learner's own difficulty rating.

        Args:
            is_correct: Whether the answer was correct
            response_time: Seconds taken to answer
            target_time: Expected seconds, defaults to the configured target
            user_difficulty: Learner-reported difficulty (0-5), optional

        Returns:
            Performance rating (0-5)
        """
        if response_time is None or response_time < 0:
            raise ValidationError("Response time must be non-negative", field="response_time")
        if user_difficulty is not None and not 0 <= user_difficulty <= 5:
            raise ValidationError("Difficulty rating must be between 0 and 5", field="difficulty_rating")

        if not is_correct:
            return 0

        target = target_time if target_time is not None else self.config.target_response_time
        rating = 3

        if response_time == 0:
            time_ratio = 2.0
        else:
            time_ratio = min(target / response_time, 2.0)

        if time_ratio > 1.5:
            rating += 2  # Very fast
        elif time_ratio > 1.2:
            rating += 1  # Faster than target
        elif time_ratio < 0.5:
            rating -= 1  # Very slow

        if user_difficulty is not None:
            if user_difficulty <= 1:
                rating = min(5, rating + 1)
            elif user_difficulty >= 4:
                rating = max(1, rating - 1)

        return max(0, min(5, rating))

    def is_due(self, next_review: Optional[Union[date, str]], today: Optional[date] = None) -> bool:
        """Check if an item is due for review. Never-scheduled items are due."""
        if next_review is None:
            return True
        return _as_date(next_review) <= (today or date.today())


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value
