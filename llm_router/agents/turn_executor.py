"""单轮执行器。

把角色系统提示词、完整对话记忆与本轮输入拼成一次模型调用，
成功时把回复追加进记忆；调用失败时把占位回复追加进记忆并返回，
对话循环照常继续。
"""

import logging
import time
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from llm_router.config.agents import AgentDescriptor
from llm_router.config.settings import settings
from llm_router.domain.conversation import ConversationStore, Message
from llm_router.domain.exceptions import NetworkError, ProviderError, RateLimitError
from llm_router.domain.models import ChatMessage, ChatResult
from llm_router.infrastructure.logging.logger import logger
from llm_router.providers.base import ModelCapability


ERROR_MARKER = "[error]"
# 只有这两类错误值得重试；ApiError（4xx/5xx 响应）直接失败
RETRYABLE_ERRORS = (RateLimitError, NetworkError)


def placeholder_response(persona: str, error: Exception) -> str:
    return f"{ERROR_MARKER} {persona} failed to respond: {error}"


class TurnExecutor:
    def __init__(
        self,
        store: ConversationStore,
        capabilities: Mapping[str, ModelCapability],
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._store = store
        self._capabilities = dict(capabilities)
        self._max_retries = settings.provider_max_retries if max_retries is None else max_retries
        self._retry_backoff = settings.provider_retry_backoff if retry_backoff is None else retry_backoff
        self._sleep = sleep

    def build_messages(self, descriptor: AgentDescriptor, input_text: str) -> List[ChatMessage]:
        """system 提示词 + 全部历史 + 本轮输入。"""

        messages = [ChatMessage(role="system", content=descriptor.role_prompt)]
        for m in self._store.messages:
            messages.append(ChatMessage(role=m.role, content=m.content))
        messages.append(ChatMessage(role="user", content=input_text))
        return messages

    def execute(self, descriptor: AgentDescriptor, input_text: str) -> str:
        """执行一轮对话并返回回复文本。

        ProviderError 不会抛给调用方，而是转成带 ERROR_MARKER 的占位回复，
        同样作为 assistant 消息写入记忆。PersistenceError 原样抛出。
        """

        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "role": descriptor.role,
            "persona": descriptor.persona,
            "model_id": descriptor.model_id,
        }
        start_time = time.time()
        messages = self.build_messages(descriptor, input_text)
        capability = self._capabilities[descriptor.model_id]

        usage: Dict[str, int] = {}
        try:
            result = self._invoke_with_retry(capability, messages, log_ctx)
            content = result.content
            if result.usage is not None:
                usage = asdict(result.usage)
        except ProviderError as e:
            self._log(
                logging.WARNING,
                "Model invocation failed, using placeholder",
                log_ctx,
                error_code=e.code,
                error=e.message,
            )
            content = placeholder_response(descriptor.persona, e)

        self._store.append(Message(role="assistant", content=content))
        self._log(
            logging.INFO,
            "Completed turn",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
            history_length=len(self._store.messages),
            **usage,
        )
        return content

    def _invoke_with_retry(
        self,
        capability: ModelCapability,
        messages: List[ChatMessage],
        log_ctx: Dict[str, Any],
    ) -> ChatResult:
        attempt = 0
        while True:
            try:
                return capability.complete(messages)
            except RETRYABLE_ERRORS as e:
                if attempt >= self._max_retries:
                    raise
                delay = self._retry_backoff * (2 ** attempt)
                attempt += 1
                self._log(
                    logging.INFO,
                    "Retrying model invocation",
                    log_ctx,
                    attempt=attempt,
                    delay_seconds=delay,
                    error_code=e.code,
                )
                self._sleep(delay)

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
