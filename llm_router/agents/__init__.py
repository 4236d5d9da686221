"""对话编排：单轮执行器与 builder/judge 循环。"""

from llm_router.agents.orchestrator import Orchestrator, OrchestratorState, RoundResult
from llm_router.agents.turn_executor import ERROR_MARKER, TurnExecutor

__all__ = ["ERROR_MARKER", "Orchestrator", "OrchestratorState", "RoundResult", "TurnExecutor"]
