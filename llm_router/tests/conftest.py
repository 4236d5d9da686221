import pytest

from llm_router.config.agents import AgentDescriptor, AgentsConfig
from llm_router.config.settings import settings


@pytest.fixture
def agents():
    return AgentsConfig(
        builder=AgentDescriptor(
            role="builder",
            model_id="chatgpt",
            persona="Bob the Builder",
            role_prompt="You build websites.",
        ),
        judge=AgentDescriptor(
            role="judge",
            model_id="claude-3-sonnet",
            persona="Judge Judy",
            role_prompt="You critique the builder.",
        ),
    )


@pytest.fixture(autouse=True)
def no_pacing(monkeypatch):
    monkeypatch.setattr(settings, "turn_delay_ms", 0)
    monkeypatch.setattr(settings, "provider_retry_backoff", 0.0)
