"""
Agent State
Defines the shared state structure for the LangGraph practice workflow.
All agents read from and write to this state.
"""
from datetime import datetime
from typing import Optional, Any, Literal
from typing_extensions import TypedDict


RequestType = Literal[
    "plan_daily_practice",
    "generate_question",
    "create_practice_session",
    "record_answer",
    "rebuild_item_state",
    "get_learning_stats",
    "score_game_session",
    "create_game_session",
    "finalize_game_session"
]


class AgentMessage(TypedDict):
    """Message from an agent"""
    agent: str
    message: str
    timestamp: str
    data: Optional[dict]


class PracticeState(TypedDict, total=False):
    """
    State shared across the agents of one engine request.

    LangGraph uses this for state management between nodes.
    """

    # ==================== REQUEST CONTEXT ====================
    request_id: str
    request_type: RequestType
    timestamp: str
    user_id: str

    # Operation arguments, keyed by parameter name
    request_input: dict

    # ==================== OUTPUT ====================
    # Model returned by the handling agent
    response: Any

    # ==================== AGENT COORDINATION ====================
    route_decision: Optional[str]
    messages: list[AgentMessage]

    # ==================== CONTROL FLAGS ====================
    is_complete: bool


def create_initial_state(
    user_id: str,
    request_type: RequestType,
    request_input: dict | None = None
) -> PracticeState:
    """
    Create initial state for a new request.

    Args:
        user_id: Learner the request is for
        request_type: Engine operation to run
        request_input: Operation arguments

    Returns:
        Initialized PracticeState
    """
    now = datetime.utcnow()

    return {
        "request_id": f"req_{user_id}_{now.timestamp()}",
        "request_type": request_type,
        "timestamp": now.isoformat(),
        "user_id": user_id,
        "request_input": request_input or {},
        "response": None,
        "route_decision": None,
        "messages": [],
        "is_complete": False
    }


def add_agent_message(
    state: PracticeState,
    agent: str,
    message: str,
    data: dict | None = None
) -> PracticeState:
    """
    Add a message from an agent to the state.

    Args:
        state: Current state
        agent: Agent name
        message: Message text
        data: Optional additional data

    Returns:
        Updated state
    """
    msg: AgentMessage = {
        "agent": agent,
        "message": message,
        "timestamp": datetime.utcnow().isoformat(),
        "data": data
    }
    state["messages"].append(msg)
    return state
