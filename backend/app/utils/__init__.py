"""
Utilities Module
Contains the pure scheduling, question generation and scoring algorithms.
"""
from app.utils.srs_algorithm import SRSAlgorithm, SRSConfig, SRSResult
from app.utils.exercise_generator import ExerciseGenerator, select_exercise_type
from app.utils.game_scoring import calculate_game_points

__all__ = [
    "SRSAlgorithm", "SRSConfig", "SRSResult",
    "ExerciseGenerator", "select_exercise_type",
    "calculate_game_points"
]
