"""
Scheduler Agent
Builds the learner's daily practice plan from the item store.

Responsibilities:
- Collect items due for review (never scheduled or next review <= today)
- Order them: never-scheduled first, then oldest due date
- Top the plan up with newly introduced items, newest first
"""
import logging
from datetime import date
from typing import Optional

from app.agents.base_agent import BaseAgent
from app.agents.state import PracticeState, add_agent_message
from app.config import Settings
from app.core.exceptions import ValidationError
from app.models.vocabulary import DailyPractice, VocabularyItem
from app.services.cosmos_db_service import CosmosDBService
from app.utils.srs_algorithm import SRSAlgorithm


logger = logging.getLogger(__name__)


class SchedulerAgent(BaseAgent[PracticeState]):
    """
    Scheduler Agent for daily practice planning.

    Reads due and new items from the store and assembles a DailyPractice.
    Store failures propagate as StoreUnavailable; an empty plan always
    means the learner has nothing due.
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
        return "scheduler"

    @property
    def description(self) -> str:
        return "Assembles daily practice plans from due and new vocabulary"

    async def process(self, state: PracticeState) -> PracticeState:
        """Process planning request"""
        request_input = state.get("request_input", {})
        self.log_start({"user_id": state["user_id"]})

        plan = await self.plan_daily_practice(
            state["user_id"],
            target_count=request_input.get("target_count") or self.settings.DAILY_PRACTICE_TARGET_COUNT,
            today=request_input.get("today")
        )

        state["response"] = plan
        state = add_agent_message(
            state,
            self.name,
            f"Planned {len(plan.review_words)} reviews and {len(plan.new_words)} new words",
            {"total_target": plan.total_target}
        )
        self.log_complete({"review": len(plan.review_words), "new": len(plan.new_words)})
        return state

    async def plan_daily_practice(
        self,
        user_id: str,
        target_count: int = 20,
        today: Optional[date] = None
    ) -> DailyPractice:
        """
        Assemble today's practice plan for a learner.

        Args:
            user_id: Learner ID
            target_count: Desired number of words (>= 1)
            today: Reference date, defaults to date.today()

        Returns:
            DailyPractice with review words first, then new words
        """
        if not user_id:
            raise ValidationError("User id is required", field="user_id")
        if target_count is None or target_count < 1:
            raise ValidationError("Target count must be at least 1", field="target_count")

        today = today or date.today()
        self.log_debug("Planning daily practice", {"user_id": user_id, "target": target_count})

        due_documents = await self.db_service.get_vocabulary_due_for_review(user_id, today)
        # The store pre-filters; due-ness is decided here on real dates
        due_items = [VocabularyItem.from_document(doc) for doc in due_documents]
        review_words = self._order_review_words(
            [item for item in due_items if self.srs.is_due(item.next_review, today)]
        )

        new_words: list[VocabularyItem] = []
        remaining = target_count - len(review_words)
        if remaining > 0:
            chosen_ids = {item.id for item in review_words}
            # Over-fetch so excluded ids never shrink the fill below the remainder
            new_documents = await self.db_service.get_new_vocabulary(
                user_id,
                limit=remaining + len(chosen_ids)
            )
            for doc in new_documents:
                item = VocabularyItem.from_document(doc)
                if item.id in chosen_ids:
                    continue
                chosen_ids.add(item.id)
                new_words.append(item)
                if len(new_words) >= remaining:
                    break

        return DailyPractice(
            user_id=user_id,
            date=today,
            review_words=review_words,
            new_words=new_words,
            total_target=target_count,
            completed=0,
            is_completed=False
        )

    def _order_review_words(self, items: list[VocabularyItem]) -> list[VocabularyItem]:
        """Never-scheduled items first, then ascending next review date."""
        return sorted(
            items,
            key=lambda item: (
                item.next_review is not None,
                item.next_review or date.min
            )
        )
