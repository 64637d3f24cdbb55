"""
Progress Agent
Reports a learner's vocabulary progress.

Responsibilities:
- Count words per mastery level
- Compute review accuracy and average response time
- Track the daily practice streak from the practice log
- Supply recent accuracy for adaptive exercise selection
"""
import logging
from datetime import date, timedelta
from typing import Optional

from app.agents.base_agent import BaseAgent
from app.agents.state import PracticeState, add_agent_message
from app.config import Settings
from app.models.vocabulary import LearningStats, MasteryLevel, PracticeRecord, VocabularyItem
from app.services.cosmos_db_service import CosmosDBService
from app.utils.srs_algorithm import SRSAlgorithm


logger = logging.getLogger(__name__)


class ProgressAgent(BaseAgent[PracticeState]):
    """
    Progress Agent for learning statistics.

    Aggregates the learner's vocabulary items and practice records.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        db_service: CosmosDBService | None = None,
        srs: SRSAlgorithm | None = None
    ):
        super().__init__(settings=settings, db_service=db_service)
        self.srs = srs or SRSAlgorithm()

    @property
    def name(self) -> str:
        return "progress"

    @property
    def description(self) -> str:
        return "Calculates vocabulary learning statistics"

    async def process(self, state: PracticeState) -> PracticeState:
        """Process statistics request"""
        self.log_start({"user_id": state["user_id"]})

        stats = await self.get_learning_stats(
            state["user_id"],
            today=state.get("request_input", {}).get("today")
        )

        state["response"] = stats
        state = add_agent_message(
            state,
            self.name,
            f"Stats: {stats.total_vocabulary} words, {stats.mastered_vocabulary} mastered"
        )
        self.log_complete()
        return state

    async def get_learning_stats(self, user_id: str, today: Optional[date] = None) -> LearningStats:
        """
        Get learning statistics for a learner.

        Args:
            user_id: Learner ID
            today: Reference date, defaults to date.today()

        Returns:
            LearningStats
        """
        today = today or date.today()
        self.log_debug("Getting learning stats", {"user_id": user_id})

        items = [
            VocabularyItem.from_document(doc)
            for doc in await self.db_service.get_vocabulary(user_id)
        ]
        records = [
            PracticeRecord.from_document(doc)
            for doc in await self.db_service.get_practice_records(user_id)
        ]

        total_reviews = sum(item.total_reviews for item in items)
        correct_reviews = sum(item.correct_reviews for item in items)

        practice_days = {record.created_at.date() for record in records}

        return LearningStats(
            user_id=user_id,
            total_vocabulary=len(items),
            mastered_vocabulary=sum(1 for item in items if item.mastery_level == MasteryLevel.MASTERED),
            learning_vocabulary=sum(1 for item in items if item.mastery_level == MasteryLevel.LEARNING),
            daily_reviews=sum(1 for item in items if self.srs.is_due(item.next_review, today)),
            streak_days=self._calculate_streak(practice_days, today),
            accuracy_rate=correct_reviews / total_reviews if total_reviews else 0.0,
            average_response_time=(
                sum(record.response_time for record in records) / len(records) if records else 0.0
            ),
            last_practice_date=max(practice_days) if practice_days else None
        )

    async def get_recent_accuracy(self, user_id: str) -> float:
        """
        Accuracy used to pick exercise types. Learners without any reviews
        get the configured default.
        """
        items = await self.db_service.get_vocabulary(user_id)
        total = sum(doc.get("totalReviews") or 0 for doc in items)
        if not total:
            return self.settings.DEFAULT_RECENT_ACCURACY
        correct = sum(doc.get("correctReviews") or 0 for doc in items)
        return min(1.0, correct / total)

    def _calculate_streak(self, practice_days: set[date], today: date) -> int:
        """Consecutive practice days ending today, or yesterday if today is still open."""
        if not practice_days:
            return 0

        day = today if today in practice_days else today - timedelta(days=1)
        streak = 0
        while day in practice_days:
            streak += 1
            day -= timedelta(days=1)
        return streak
