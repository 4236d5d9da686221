"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 与 ModelCapability 抽象接口 (base)。
- 维护 Provider 与模型配置，并把逻辑模型名解析为调用能力 (registry)。
- 提供各厂商的具体实现 (openai_client、anthropic_client)。
"""

from llm_router.providers.base import ModelCapability, ProviderClient
from llm_router.providers.registry import ModelRegistry

__all__ = ["ModelCapability", "ModelRegistry", "ProviderClient"]
