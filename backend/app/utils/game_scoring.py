"""
Game Scoring
Converts the outcome of a completed quiz or matching session into points.
"""
import math

from app.core.exceptions import ValidationError
from app.models.game import PointsConfig


def calculate_game_points(
    correct_count: int,
    total_count: int,
    time_spent_seconds: float,
    best_streak: int,
    config: PointsConfig
) -> int:
    """
    Calculate the points earned by a game session.

    Steps, applied in order:
    1. correct_count * base points
    2. speed bonus when the time (per question or whole session,
       depending on config.speed_bonus_basis) beats the threshold
    3. streak of 3 or more multiplies the running total (floored)
    4. perfect score bonus
    5. accuracy bonus when correct/total reaches the threshold

    Args:
        correct_count: Correct answers in the session
        total_count: Questions or pairs in the session
        time_spent_seconds: Total session time
        best_streak: Longest run of consecutive correct answers
        config: Points constants for the game type

    Returns:
        Points earned (non-negative integer)
    """
    if total_count < 1:
        raise ValidationError("A game session needs at least one question", field="total_count")
    if not 0 <= correct_count <= total_count:
        raise ValidationError("Correct count must be between 0 and the total", field="correct_count")
    if time_spent_seconds < 0:
        raise ValidationError("Time spent must be non-negative", field="time_spent_seconds")
    if best_streak < 0:
        raise ValidationError("Streak must be non-negative", field="best_streak")

    points = correct_count * config.base_points_per_correct

    if config.speed_bonus_basis == "per_question":
        measured_time = time_spent_seconds / total_count
    else:
        measured_time = time_spent_seconds
    if measured_time < config.speed_bonus_threshold_seconds:
        points += config.speed_bonus_points

    if best_streak >= 3:
        points = math.floor(points * config.streak_bonus_multiplier)

    if correct_count == total_count:
        points += config.perfect_score_bonus

    if correct_count / total_count >= config.accuracy_bonus_threshold:
        points += config.accuracy_bonus_points

    return points
