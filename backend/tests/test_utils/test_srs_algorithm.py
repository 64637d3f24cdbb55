"""
Tests for the SM-2 scheduling algorithm.
"""
import pytest
from datetime import date

from app.core.exceptions import ValidationError
from app.utils.srs_algorithm import SRSAlgorithm, SRSConfig


TODAY = date(2024, 3, 15)


@pytest.fixture
def srs():
    return SRSAlgorithm()


class TestCalculate:
    """Interval, repetitions and ease factor updates."""

    def test_first_success_uses_first_interval(self, srs):
        result = srs.calculate(2.5, 0, 0, 4, today=TODAY)

        assert result.repetitions == 1
        assert result.interval == 1
        assert result.ease_factor == 2.5
        assert result.next_review == date(2024, 3, 16)
        assert result.is_correct is True

    def test_second_success_uses_second_interval(self, srs):
        result = srs.calculate(2.5, 1, 1, 4, today=TODAY)

        assert result.repetitions == 2
        assert result.interval == 6
        assert result.next_review == date(2024, 3, 21)

    def test_third_success_multiplies_previous_interval(self, srs):
        result = srs.calculate(2.5, 6, 2, 4, today=TODAY)

        assert result.repetitions == 3
        assert result.interval == 15
        assert result.ease_factor == 2.5

    def test_perfect_rating_raises_ease(self, srs):
        result = srs.calculate(2.5, 6, 2, 5, today=TODAY)

        # Interval uses the ease factor from before the review
        assert result.interval == 15
        assert result.ease_factor == 2.6

    def test_rating_three_lowers_ease(self, srs):
        result = srs.calculate(2.5, 6, 2, 3, today=TODAY)

        assert result.ease_factor == 2.36
        assert result.is_correct is True

    def test_failure_resets_and_lowers_ease(self, srs):
        result = srs.calculate(2.5, 6, 2, 1, today=TODAY)

        assert result.repetitions == 0
        assert result.interval == 1
        assert result.ease_factor == 2.3
        assert result.next_review == date(2024, 3, 16)
        assert result.is_correct is False

    def test_ease_never_below_minimum(self, srs):
        result = srs.calculate(1.3, 10, 4, 0, today=TODAY)

        assert result.ease_factor == 1.3

    def test_ease_never_above_maximum(self, srs):
        result = srs.calculate(3.0, 6, 2, 5, today=TODAY)

        assert result.ease_factor == 3.0
        assert result.interval == 18

    def test_interval_capped_at_maximum(self, srs):
        result = srs.calculate(2.5, 200, 5, 4, today=TODAY)

        assert result.interval == 365

    def test_interval_modifier_applied(self):
        srs = SRSAlgorithm(SRSConfig(interval_modifier=2.0))

        result = srs.calculate(2.5, 6, 2, 4, today=TODAY)

        assert result.interval == 30

    @pytest.mark.parametrize("rating", [-1, 6, 3.5, True, None])
    def test_invalid_rating_rejected(self, srs, rating):
        with pytest.raises(ValidationError):
            srs.calculate(2.5, 6, 2, rating, today=TODAY)

    def test_negative_repetitions_rejected(self, srs):
        with pytest.raises(ValidationError):
            srs.calculate(2.5, 6, -1, 4, today=TODAY)


class TestPerformanceRating:
    """Rating from correctness, response time and learner difficulty."""

    def test_incorrect_is_zero(self, srs):
        assert srs.calculate_performance_rating(False, 2.0) == 0

    def test_on_target_time_is_three(self, srs):
        assert srs.calculate_performance_rating(True, 10.0) == 3

    def test_faster_than_target_is_four(self, srs):
        assert srs.calculate_performance_rating(True, 8.0) == 4

    def test_very_fast_is_five(self, srs):
        assert srs.calculate_performance_rating(True, 5.0) == 5

    def test_very_slow_is_two(self, srs):
        assert srs.calculate_performance_rating(True, 25.0) == 2

    def test_zero_response_time_counts_as_very_fast(self, srs):
        assert srs.calculate_performance_rating(True, 0.0) == 5

    def test_easy_difficulty_adds_one(self, srs):
        assert srs.calculate_performance_rating(True, 10.0, user_difficulty=0) == 4

    def test_easy_difficulty_capped_at_five(self, srs):
        assert srs.calculate_performance_rating(True, 5.0, user_difficulty=1) == 5

    def test_hard_difficulty_subtracts_one(self, srs):
        assert srs.calculate_performance_rating(True, 10.0, user_difficulty=5) == 2

    def test_correct_answer_never_below_one(self, srs):
        assert srs.calculate_performance_rating(True, 25.0, user_difficulty=4) == 1

    def test_custom_target_time(self, srs):
        assert srs.calculate_performance_rating(True, 10.0, target_time=20.0) == 5

    def test_negative_response_time_rejected(self, srs):
        with pytest.raises(ValidationError):
            srs.calculate_performance_rating(True, -1.0)

    def test_out_of_range_difficulty_rejected(self, srs):
        with pytest.raises(ValidationError):
            srs.calculate_performance_rating(False, 3.0, user_difficulty=6)


class TestDueDates:
    """Due checks."""

    def test_never_scheduled_is_due(self, srs):
        assert srs.is_due(None, TODAY) is True

    def test_due_today(self, srs):
        assert srs.is_due(TODAY, TODAY) is True

    def test_future_review_not_due(self, srs):
        assert srs.is_due(date(2024, 3, 16), TODAY) is False

    def test_iso_string_accepted(self, srs):
        assert srs.is_due("2024-03-10T08:00:00", TODAY) is True
        assert srs.is_due("2024-03-15T09:00:00", TODAY) is True
        assert srs.is_due("2024-03-16T00:00:00", TODAY) is False


class TestSequences:
    """Properties over several consecutive reviews."""

    @pytest.mark.parametrize("ratings", [
        [5] * 12,
        [0] * 12,
        [5, 5, 5, 0, 5, 3, 3, 3, 1, 4, 5, 5],
        [3, 0, 3, 0, 3, 0, 3, 0],
        [4, 5, 2, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5, 5],
    ])
    def test_bounds_hold_for_any_sequence(self, srs, ratings):
        ease_factor, interval, repetitions = 2.5, 0, 0

        for rating in ratings:
            result = srs.calculate(ease_factor, interval, repetitions, rating, today=TODAY)
            ease_factor, interval, repetitions = result.ease_factor, result.interval, result.repetitions

            assert 1.3 <= ease_factor <= 3.0
            assert 0 <= interval <= 365
            assert repetitions >= 0

    def test_consecutive_perfect_answers_grow_interval(self, srs):
        ease_factor, interval, repetitions = 2.5, 0, 0
        intervals = []

        for _ in range(3):
            result = srs.calculate(ease_factor, interval, repetitions, 5, today=TODAY)
            ease_factor, interval, repetitions = result.ease_factor, result.interval, result.repetitions
            intervals.append(interval)

        assert intervals[0] < intervals[1] < intervals[2]
        assert intervals == [1, 6, 16]


class TestConfig:
    """Configuration loading."""

    def test_from_settings_matches_defaults(self, test_settings):
        assert SRSConfig.from_settings(test_settings) == SRSConfig()

    def test_default_algorithm_uses_default_config(self):
        assert SRSAlgorithm().config.first_interval == 1
        assert SRSAlgorithm().config.second_interval == 6
