import logging

import pytest

from llm_router.agents.turn_executor import ERROR_MARKER, TurnExecutor
from llm_router.domain.conversation import Message
from llm_router.domain.exceptions import ApiError, NetworkError, PersistenceError, RateLimitError
from llm_router.domain.models import ChatChoice, ChatMessage, ChatResult, ChatUsage
from llm_router.infrastructure.storage.memory_store import InMemoryConversationStore
from llm_router.providers.base import ModelCapability


class FakeProvider:
    """按顺序返回预设回复；预设值为异常时直接抛出。"""

    name = "fake"

    def __init__(self, replies):
        self._replies = list(replies)
        self.requests = []

    def chat(self, req):
        self.requests.append(req)
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        msg = ChatMessage(role="assistant", content=reply)
        return ChatResult(provider="fake", model=req.model, choices=[ChatChoice(index=0, message=msg)])


def _executor(store, provider, **kw):
    capabilities = {
        "chatgpt": ModelCapability("chatgpt", provider),
        "claude-3-sonnet": ModelCapability("claude-3-sonnet", provider),
    }
    return TurnExecutor(store=store, capabilities=capabilities, **kw)


def test_prompt_assembly(agents):
    store = InMemoryConversationStore([
        Message(role="user", content="seed"),
        Message(role="assistant", content="first answer"),
    ])
    provider = FakeProvider(["second answer"])
    executor = _executor(store, provider)

    reply = executor.execute(agents.builder, "next input")

    assert reply == "second answer"
    sent = provider.requests[0].messages
    assert [(m.role, m.content) for m in sent] == [
        ("system", "You build websites."),
        ("user", "seed"),
        ("assistant", "first answer"),
        ("user", "next input"),
    ]
    assert provider.requests[0].model == "chatgpt"


def test_success_appends_assistant_message(agents):
    store = InMemoryConversationStore([Message(role="user", content="seed")])
    executor = _executor(store, FakeProvider(["built it"]))
    executor.execute(agents.builder, "seed")
    assert store.messages[-1] == Message(role="assistant", content="built it")
    assert len(store.messages) == 2


def test_provider_error_becomes_placeholder(agents):
    store = InMemoryConversationStore([Message(role="user", content="seed")])
    executor = _executor(store, FakeProvider([ApiError(code="API_ERROR", message="HTTP 500: boom")]))

    reply = executor.execute(agents.judge, "critique this")

    assert reply.startswith(ERROR_MARKER)
    assert "Judge Judy" in reply
    assert "HTTP 500: boom" in reply
    assert store.messages[-1] == Message(role="assistant", content=reply)
    assert len(store.messages) == 2


def test_retryable_errors_are_retried(agents):
    store = InMemoryConversationStore([Message(role="user", content="seed")])
    provider = FakeProvider([
        RateLimitError(code="RATE_LIMIT", message="slow down"),
        NetworkError(code="NETWORK_ERROR", message="reset"),
        "finally",
    ])
    sleeps = []
    executor = _executor(store, provider, max_retries=2, retry_backoff=0.5, sleep=sleeps.append)

    assert executor.execute(agents.builder, "seed") == "finally"
    assert sleeps == [0.5, 1.0]
    assert len(provider.requests) == 3


def test_retries_exhausted_gives_placeholder(agents):
    store = InMemoryConversationStore([Message(role="user", content="seed")])
    provider = FakeProvider([RateLimitError(code="RATE_LIMIT", message="slow down")] * 3)
    executor = _executor(store, provider, max_retries=2, retry_backoff=0.0, sleep=lambda s: None)

    reply = executor.execute(agents.builder, "seed")
    assert reply.startswith(ERROR_MARKER)
    assert len(provider.requests) == 3


def test_api_error_not_retried(agents):
    store = InMemoryConversationStore([Message(role="user", content="seed")])
    provider = FakeProvider([ApiError(code="API_ERROR", message="bad request"), "unused"])
    executor = _executor(store, provider, max_retries=3, sleep=lambda s: None)
    executor.execute(agents.builder, "seed")
    assert len(provider.requests) == 1


def test_persistence_error_propagates(agents):
    class BrokenStore(InMemoryConversationStore):
        def append(self, message):
            raise PersistenceError(code="STORE_WRITE_ERROR", message="read-only fs")

    executor = _executor(BrokenStore([Message(role="user", content="seed")]), FakeProvider(["ok"]))
    with pytest.raises(PersistenceError):
        executor.execute(agents.builder, "seed")


def test_completed_turn_logs_token_usage(agents, caplog):
    class MeteredProvider(FakeProvider):
        def chat(self, req):
            result = super().chat(req)
            result.usage = ChatUsage(prompt_tokens=12, completion_tokens=5, total_tokens=17)
            return result

    store = InMemoryConversationStore([Message(role="user", content="seed")])
    executor = _executor(store, MeteredProvider(["built it"]))

    with caplog.at_level(logging.INFO, logger="llm_router"):
        executor.execute(agents.builder, "seed")

    done = [r for r in caplog.records if r.getMessage() == "Completed turn"]
    assert len(done) == 1
    assert done[0].extra["total_tokens"] == 17
    assert done[0].extra["prompt_tokens"] == 12
    assert done[0].extra["persona"] == "Bob the Builder"
