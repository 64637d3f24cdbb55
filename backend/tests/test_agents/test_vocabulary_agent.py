"""
Tests for VocabularyAgent
Tests answer recording, SRS rescheduling, mastery transitions and state rebuild.
"""
import pytest
from datetime import date

from app.agents.state import create_initial_state
from app.agents.vocabulary_agent import (
    VocabularyAgent,
    check_answer,
    next_mastery_level,
    record_id_for
)
from app.core.exceptions import NotFoundError, StoreUnavailable, ValidationError
from app.models.vocabulary import MasteryLevel


TODAY = date(2024, 3, 15)
QUESTION_ID = "v1-word-meaning-match-0a1b2c3d4e5f"


@pytest.fixture
def vocabulary_agent(test_settings, mock_cosmos_service):
    return VocabularyAgent(settings=test_settings, db_service=mock_cosmos_service)


@pytest.fixture
def stored_item(make_vocab_doc):
    return make_vocab_doc(
        "v1",
        "serendipity",
        "finding good things by chance",
        masteryLevel=1,
        easeFactor=2.5,
        interval=6,
        repetitions=2,
        nextReview="2024-03-15",
        totalReviews=2,
        correctReviews=2,
        category="daily-life"
    )


def answer_kwargs(**overrides):
    kwargs = {
        "user_id": "test_user_123",
        "question_id": QUESTION_ID,
        "vocabulary_id": "v1",
        "submitted_answer": "finding good things by chance",
        "correct_answer": "finding good things by chance",
        "response_time_seconds": 8.0,
        "today": TODAY
    }
    kwargs.update(overrides)
    return kwargs


class TestHelpers:
    """Module level helpers."""

    def test_check_answer_trims_and_ignores_case(self):
        assert check_answer("  Serendipity ", "serendipity") is True
        assert check_answer("serendipitous", "serendipity") is False
        assert check_answer(None, "serendipity") is False

    @pytest.mark.parametrize("current,rating,previous_repetitions,expected", [
        (MasteryLevel.NEW, 3, 0, MasteryLevel.LEARNING),
        (MasteryLevel.NEW, 5, 0, MasteryLevel.LEARNING),
        (MasteryLevel.LEARNING, 4, 3, MasteryLevel.MASTERED),
        (MasteryLevel.LEARNING, 4, 2, MasteryLevel.LEARNING),
        (MasteryLevel.LEARNING, 3, 5, MasteryLevel.LEARNING),
        (MasteryLevel.MASTERED, 0, 0, MasteryLevel.MASTERED),
        (MasteryLevel.NEW, 1, 0, MasteryLevel.NEW),
    ])
    def test_mastery_transition(self, current, rating, previous_repetitions, expected):
        assert next_mastery_level(current, rating, previous_repetitions) == expected

    def test_record_id_is_deterministic(self):
        assert record_id_for("u1", "q1") == record_id_for("u1", "q1") == "record_u1_q1"


class TestRecordAnswer:
    """Answer recording and rescheduling."""

    @pytest.mark.asyncio
    async def test_correct_answer_reschedules(self, vocabulary_agent, stored_item):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item

        outcome = await vocabulary_agent.record_answer(**answer_kwargs())

        assert outcome.is_correct is True
        assert outcome.performance_rating == 4
        assert outcome.repetitions == 3
        assert outcome.interval == 15
        assert outcome.ease_factor == 2.5
        assert outcome.next_review_date == date(2024, 3, 30)
        assert outcome.new_mastery_level == MasteryLevel.LEARNING
        assert outcome.already_recorded is False

    @pytest.mark.asyncio
    async def test_wrong_answer_resets_interval(self, vocabulary_agent, stored_item):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item

        outcome = await vocabulary_agent.record_answer(**answer_kwargs(submitted_answer="lasting a short time"))

        assert outcome.is_correct is False
        assert outcome.performance_rating == 0
        assert outcome.repetitions == 0
        assert outcome.interval == 1
        assert outcome.ease_factor == 2.3
        # Mastery never goes down
        assert outcome.new_mastery_level == MasteryLevel.LEARNING

    @pytest.mark.asyncio
    async def test_reaches_mastered_after_three_successes(self, vocabulary_agent, stored_item):
        stored_item.update({"repetitions": 3, "interval": 15})
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item

        outcome = await vocabulary_agent.record_answer(**answer_kwargs(response_time_seconds=4.0))

        assert outcome.performance_rating == 5
        assert outcome.new_mastery_level == MasteryLevel.MASTERED
        assert outcome.interval == 38

    @pytest.mark.asyncio
    async def test_record_written_before_item(self, vocabulary_agent, stored_item):
        db = vocabulary_agent.db_service
        db.get_vocabulary_item.return_value = stored_item

        await vocabulary_agent.record_answer(**answer_kwargs(difficulty_rating=2))

        call_order = [name for name, _, _ in db.mock_calls if name.startswith("save_")]
        assert call_order == ["save_practice_record", "save_vocabulary_item"]

        record = db.save_practice_record.call_args.args[1]
        assert record["id"] == f"record_test_user_123_{QUESTION_ID}"
        assert record["exerciseType"] == "word-meaning-match"
        assert record["isCorrect"] is True
        assert record["difficultyRating"] == 2
        assert record["performanceRating"] == 4

        item = db.save_vocabulary_item.call_args.args[1]
        assert item["totalReviews"] == 3
        assert item["correctReviews"] == 3
        assert item["nextReview"] == "2024-03-30"
        assert item["lastRecordId"] == record["id"]
        # Keys the model does not know survive the write
        assert item["category"] == "daily-life"

    @pytest.mark.asyncio
    async def test_retry_applies_answer_once(self, vocabulary_agent, stored_item):
        db = vocabulary_agent.db_service
        db.get_vocabulary_item.return_value = stored_item

        first = await vocabulary_agent.record_answer(**answer_kwargs())
        saved_item = db.save_vocabulary_item.call_args.args[1]
        saved_record = db.save_practice_record.call_args.args[1]
        db.get_vocabulary_item.return_value = saved_item
        db.get_practice_record.return_value = saved_record
        db.save_vocabulary_item.reset_mock()
        db.save_practice_record.reset_mock()

        second = await vocabulary_agent.record_answer(**answer_kwargs())

        assert second.already_recorded is True
        assert second.interval == first.interval
        assert second.repetitions == first.repetitions
        assert second.next_review_date == first.next_review_date
        db.save_vocabulary_item.assert_not_called()
        db.save_practice_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_after_failed_item_write(self, vocabulary_agent, stored_item):
        db = vocabulary_agent.db_service
        db.get_vocabulary_item.return_value = stored_item
        db.save_vocabulary_item.side_effect = StoreUnavailable("timeout", operation="upsert vocabulary")

        with pytest.raises(StoreUnavailable):
            await vocabulary_agent.record_answer(**answer_kwargs())

        db.save_vocabulary_item.side_effect = lambda user_id, item: item
        outcome = await vocabulary_agent.record_answer(**answer_kwargs())

        # Same record id is upserted again and the item is updated once
        assert outcome.repetitions == 3
        record_ids = {call.args[1]["id"] for call in db.save_practice_record.call_args_list}
        assert record_ids == {f"record_test_user_123_{QUESTION_ID}"}

    @pytest.mark.asyncio
    async def test_exercise_type_from_argument(self, vocabulary_agent, stored_item):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item

        await vocabulary_agent.record_answer(**answer_kwargs(
            question_id="q-123",
            exercise_type="context-usage"
        ))

        record = vocabulary_agent.db_service.save_practice_record.call_args.args[1]
        assert record["exerciseType"] == "context-usage"

    @pytest.mark.asyncio
    async def test_underivable_exercise_type_rejected(self, vocabulary_agent, stored_item):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item

        with pytest.raises(ValidationError):
            await vocabulary_agent.record_answer(**answer_kwargs(question_id="q-123"))

        vocabulary_agent.db_service.get_vocabulary_item.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"response_time_seconds": -1.0},
        {"difficulty_rating": 7},
        {"user_id": ""},
        {"correct_answer": "  "},
        {"exercise_type": "crossword"},
    ])
    async def test_invalid_input_rejected_before_store_access(self, vocabulary_agent, overrides):
        with pytest.raises(ValidationError):
            await vocabulary_agent.record_answer(**answer_kwargs(**overrides))

        vocabulary_agent.db_service.get_vocabulary_item.assert_not_called()
        vocabulary_agent.db_service.save_practice_record.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_item_raises_not_found(self, vocabulary_agent):
        with pytest.raises(NotFoundError):
            await vocabulary_agent.record_answer(**answer_kwargs())

        vocabulary_agent.db_service.save_practice_record.assert_not_called()


class TestRebuildItemState:
    """Replay of the practice log."""

    @pytest.mark.asyncio
    async def test_replay_matches_incremental_updates(self, vocabulary_agent, make_vocab_doc):
        db = vocabulary_agent.db_service
        db.get_vocabulary_item.return_value = make_vocab_doc(
            "v1", "serendipity", masteryLevel=0, easeFactor=1.9, interval=40, repetitions=9
        )
        db.get_practice_records.return_value = [
            {
                "id": f"r{i}",
                "userId": "test_user_123",
                "vocabularyId": "v1",
                "questionId": f"v1-word-meaning-match-{i}",
                "exerciseType": "word-meaning-match",
                "userAnswer": "x",
                "correctAnswer": "x",
                "isCorrect": True,
                "responseTime": 8.0,
                "performanceRating": 4,
                "createdAt": f"2024-03-{10 + i:02d}T09:00:00"
            }
            for i in range(3)
        ]

        item = await vocabulary_agent.rebuild_item_state("test_user_123", "v1")

        assert item.repetitions == 3
        assert item.interval == 15
        assert item.ease_factor == 2.5
        assert item.next_review == date(2024, 3, 27)
        assert item.total_reviews == 3
        assert item.correct_reviews == 3
        assert item.mastery_level == MasteryLevel.LEARNING
        assert item.last_record_id == "r2"
        db.get_practice_records.assert_awaited_once_with("test_user_123", "v1")
        db.save_vocabulary_item.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rebuild_without_records_resets_schedule(self, vocabulary_agent, make_vocab_doc):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = make_vocab_doc(
            "v1", "serendipity", masteryLevel=2, interval=40, repetitions=5, nextReview="2024-04-01"
        )

        item = await vocabulary_agent.rebuild_item_state("test_user_123", "v1")

        assert item.repetitions == 0
        assert item.interval == 0
        assert item.next_review is None
        assert item.ease_factor == 2.5
        # Stored mastery is kept
        assert item.mastery_level == MasteryLevel.MASTERED

    @pytest.mark.asyncio
    async def test_rebuild_unknown_item(self, vocabulary_agent):
        with pytest.raises(NotFoundError):
            await vocabulary_agent.rebuild_item_state("test_user_123", "missing")


class TestVocabularyProcess:
    """Graph node behavior."""

    @pytest.mark.asyncio
    async def test_process_record_answer(self, vocabulary_agent, stored_item):
        vocabulary_agent.db_service.get_vocabulary_item.return_value = stored_item
        request_input = answer_kwargs()
        user_id = request_input.pop("user_id")
        state = create_initial_state(user_id, "record_answer", request_input)

        result = await vocabulary_agent.process(state)

        assert result["response"].interval == 15
        assert "correct" in result["messages"][-1]["message"]
