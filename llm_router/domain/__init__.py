"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult 模型。
- conversation: 对话记忆中的 Message 及 ConversationStore 抽象。
- exceptions: 异常类型定义。
"""
