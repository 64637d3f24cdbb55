"""
Tests for game points calculation.
"""
import pytest

from app.core.exceptions import ValidationError
from app.models.game import PointsConfig
from app.utils.game_scoring import calculate_game_points


@pytest.fixture
def quiz_config(test_settings):
    return PointsConfig.quiz_from_settings(test_settings)


@pytest.fixture
def matching_config(test_settings):
    return PointsConfig.matching_from_settings(test_settings)


class TestQuizPoints:
    """Quiz sessions: speed bonus measured per question."""

    def test_perfect_fast_session_with_streak(self, quiz_config):
        # 100 + 5 speed = 105, x1.5 -> 157, +100 perfect, +50 accuracy
        assert calculate_game_points(10, 10, 80, 4, quiz_config) == 307

    def test_accuracy_bonus_at_threshold(self, quiz_config):
        assert calculate_game_points(8, 10, 150, 2, quiz_config) == 130

    def test_plain_session(self, quiz_config):
        assert calculate_game_points(5, 10, 200, 0, quiz_config) == 50

    def test_streak_of_three_triggers_multiplier(self, quiz_config):
        assert calculate_game_points(3, 10, 200, 3, quiz_config) == 45

    def test_streak_applies_before_flat_bonuses(self, quiz_config):
        # 100 x1.5 = 150, then +100 and +50
        assert calculate_game_points(10, 10, 150, 10, quiz_config) == 300

    def test_speed_threshold_is_strict(self, quiz_config):
        assert calculate_game_points(5, 10, 100, 0, quiz_config) == 50
        assert calculate_game_points(5, 10, 99, 0, quiz_config) == 55


class TestMatchingPoints:
    """Matching sessions: speed bonus measured on total time."""

    def test_perfect_fast_session(self, matching_config):
        # 64 + 25 = 89, x1.3 -> 115, +80 perfect, +40 accuracy
        assert calculate_game_points(8, 8, 50, 8, matching_config) == 235

    def test_below_accuracy_threshold(self, matching_config):
        assert calculate_game_points(6, 8, 70, 2, matching_config) == 48

    def test_total_time_not_divided(self, matching_config):
        # 70 s total is over the 60 s threshold even though it is under 60 s per pair
        assert calculate_game_points(1, 8, 70, 0, matching_config) == 8


class TestValidation:
    """Rejected inputs."""

    @pytest.mark.parametrize("correct,total,time_spent,streak", [
        (0, 0, 10, 0),
        (11, 10, 10, 0),
        (-1, 10, 10, 0),
        (5, 10, -1, 0),
        (5, 10, 10, -2),
    ])
    def test_invalid_counters_rejected(self, quiz_config, correct, total, time_spent, streak):
        with pytest.raises(ValidationError):
            calculate_game_points(correct, total, time_spent, streak, quiz_config)
