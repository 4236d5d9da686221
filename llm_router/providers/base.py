"""Provider 抽象接口。

上层 TurnExecutor 不直接依赖具体厂商的 HTTP 调用，而是依赖两层协议：

- ProviderClient：每个厂商一个实现（OpenAIClient、AnthropicClient），
  负责把 ChatRequest 转成具体 API 请求，并把响应 JSON 解析为 ChatResult。
- ModelCapability：registry 解析出的可调用对象，绑定了 Provider 与逻辑模型，
  对外暴露 invoke(messages) -> str；需要 token 统计时用 complete(messages)。
"""

from typing import List, Protocol

from llm_router.domain.models import ChatMessage, ChatRequest, ChatResult


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    - name: Provider 名称，用于日志/统计。
    - chat(req): 执行一次非流式对话调用，返回统一的 ChatResult。
      失败时抛出 ProviderError 的子类。
    """

    name: str

    def chat(self, req: ChatRequest) -> ChatResult:
        ...


class ModelCapability:
    """已解析的模型调用能力，本身无状态。"""

    def __init__(self, model_id: str, client: ProviderClient):
        self.model_id = model_id
        self.client = client

    @property
    def provider(self) -> str:
        return self.client.name

    def complete(self, messages: List[ChatMessage]) -> ChatResult:
        req = ChatRequest(provider=self.client.name, model=self.model_id, messages=list(messages))
        return self.client.chat(req)

    def invoke(self, messages: List[ChatMessage]) -> str:
        return self.complete(messages).content

    def __repr__(self) -> str:
        return f"ModelCapability(model_id={self.model_id!r}, provider={self.provider!r})"
