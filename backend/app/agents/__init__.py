"""
Agents Module
Agent-based learning engine for vocabulary practice using LangGraph.

This module contains:
- Base agent class
- Shared state definition
- Specialized agents for each part of the practice workflow
- Orchestrator and the LearningEngine facade

Available Agents:
- Orchestrator: Central coordinator using LangGraph
- Scheduler: Daily practice planning from due and new words
- Practice: Adaptive exercise questions and practice sessions
- Vocabulary: Answer recording and SRS rescheduling
- Progress: Learning statistics
- Game: Quiz and matching sessions and scoring
"""

# Base classes
from app.agents.base_agent import BaseAgent

# Shared state
from app.agents.state import (
    PracticeState,
    AgentMessage,
    create_initial_state,
    add_agent_message
)

# Agents
from app.agents.scheduler_agent import SchedulerAgent
from app.agents.practice_agent import PracticeAgent
from app.agents.vocabulary_agent import VocabularyAgent
from app.agents.progress_agent import ProgressAgent
from app.agents.game_agent import GameAgent

# Orchestrator
from app.agents.orchestrator import Orchestrator, LearningEngine


__all__ = [
    # Base
    "BaseAgent",
    # State
    "PracticeState",
    "AgentMessage",
    "create_initial_state",
    "add_agent_message",
    # Agents
    "SchedulerAgent",
    "PracticeAgent",
    "VocabularyAgent",
    "ProgressAgent",
    "GameAgent",
    # Orchestrator
    "Orchestrator",
    "LearningEngine",
]
