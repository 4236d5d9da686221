"""Builder / Judge 对话编排。

状态机：AWAITING_BUILDER -> AWAITING_JUDGE -> AWAITING_HUMAN -> AWAITING_BUILDER ...

- builder 的输入是记忆中最后一条消息的内容；
- judge 的输入是 builder 刚产出的原文，而不是重新读取记忆尾部；
- 人类插话非空时追加为 user 消息，成为下一轮 builder 的输入；
  为空时不追加，下一轮 builder 直接回应 judge 的最后一条回复。

循环本身没有终止状态，只在 max_rounds 用尽、输入关闭或外部中断时停止。
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from llm_router.agents.turn_executor import TurnExecutor
from llm_router.config.agents import AgentsConfig
from llm_router.config.settings import settings
from llm_router.domain.conversation import ConversationStore, Message
from llm_router.infrastructure.logging.logger import logger
from llm_router.interaction.console import InputClosed, InterjectionChannel


class OrchestratorState(str, Enum):
    AWAITING_BUILDER = "awaiting_builder"
    AWAITING_JUDGE = "awaiting_judge"
    AWAITING_HUMAN = "awaiting_human"


@dataclass
class RoundResult:
    builder_input: str
    builder_reply: str
    judge_reply: str
    interjection: Optional[Message] = None


class Orchestrator:
    def __init__(
        self,
        agents: AgentsConfig,
        executor: TurnExecutor,
        store: ConversationStore,
        channel: InterjectionChannel,
        display: Callable[[str], Any] = print,
        sleep: Callable[[float], None] = time.sleep,
        turn_delay_ms: Optional[int] = None,
        seed_prompt: Optional[str] = None,
    ):
        self._agents = agents
        self._executor = executor
        self._store = store
        self._channel = channel
        self._display = display
        self._sleep = sleep
        self._turn_delay_ms = settings.turn_delay_ms if turn_delay_ms is None else turn_delay_ms
        self._seed_prompt = seed_prompt or settings.seed_prompt
        self.state = OrchestratorState.AWAITING_BUILDER

    def seed(self) -> bool:
        """记忆为空时写入一条默认的人类消息，返回是否写入。"""

        if self._store.messages:
            return False
        self._store.append(Message(role="user", content=self._seed_prompt))
        logger.info("Seeded empty conversation", extra={"extra": {"seed_prompt": self._seed_prompt}})
        return True

    def run_round(self) -> RoundResult:
        builder = self._agents.builder
        judge = self._agents.judge

        self.state = OrchestratorState.AWAITING_BUILDER
        builder_input = self._store.messages[-1].content
        builder_reply = self._executor.execute(builder, builder_input)
        self._display(f"{builder.persona}: {builder_reply}\n")

        if self._turn_delay_ms:
            self._sleep(self._turn_delay_ms / 1000.0)

        self.state = OrchestratorState.AWAITING_JUDGE
        judge_reply = self._executor.execute(judge, builder_reply)
        self._display(f"{judge.persona}: {judge_reply}\n")

        self.state = OrchestratorState.AWAITING_HUMAN
        interjection = self._channel.read()
        if interjection is not None:
            self._store.append(interjection)
        self.state = OrchestratorState.AWAITING_BUILDER

        return RoundResult(
            builder_input=builder_input,
            builder_reply=builder_reply,
            judge_reply=judge_reply,
            interjection=interjection,
        )

    def run(self, max_rounds: Optional[int] = None) -> int:
        """运行对话循环，返回完成的轮数。

        max_rounds 为 None 时无限运行，直到输入关闭或外部中断。
        """

        self.seed()
        rounds = 0
        logger.info(
            "Conversation started",
            extra={"extra": {
                "builder": self._agents.builder.persona,
                "judge": self._agents.judge.persona,
                "history_length": len(self._store.messages),
            }},
        )
        while max_rounds is None or rounds < max_rounds:
            try:
                self.run_round()
            except InputClosed:
                rounds += 1
                logger.info("Input closed, stopping", extra={"extra": {"rounds": rounds}})
                break
            rounds += 1
        return rounds
