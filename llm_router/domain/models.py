"""统一的对话与结果数据模型。

本模块定义了不同 Provider 之间共享的标准数据结构：

- ChatMessage: 一条发给模型的消息（system/user/assistant）。
- ChatRequest: 发给底层 LLM Provider 的完整请求。
- ChatResult: 从 Provider 解析后的统一响应结果。

所有 Provider 适配器（OpenAIClient、AnthropicClient）都只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass
from typing import List, Literal, Optional


# LLM 消息角色类型（与 OpenAI / Anthropic 的 role 字段对应）
Role = Literal["system", "user", "assistant"]


@dataclass
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。"""

    role: Role
    content: str


@dataclass
class ChatRequest:
    """一次完整的聊天请求。

    TurnExecutor 把系统提示词、历史与本轮输入拼成 ChatRequest，
    Provider 适配层负责把它转换成各家 API 的 JSON 请求体。
    """

    provider: str  # Provider 名，如 "openai"
    model: str  # 逻辑模型名，如 "chatgpt"（再由 registry 映射为真实模型名）
    messages: List[ChatMessage]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass
class ChatUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class ChatChoice:
    """单个候选回答（目前只用 index=0 的一条）。"""

    index: int
    message: ChatMessage
    finish_reason: Optional[str] = None


@dataclass
class ChatResult:
    """一次对话调用的最终结果。

    - provider / model: 逻辑 Provider 名与逻辑模型名。
    - choices: 一个或多个候选回答。
    - usage: 可选的 token 使用统计，TurnExecutor 会把它写进日志。
    """

    provider: str
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None

    @property
    def content(self) -> str:
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""
