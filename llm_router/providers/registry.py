"""Provider 与模型配置。

本模块将“逻辑模型名”与“具体厂商模型名”解耦：

- 逻辑名（logical_name）：配置文件里使用的名称，例如 "chatgpt"。
- provider_model：厂商实际提供的模型 ID，例如 "gpt-4o"。

另外支持 "openai:gpt-4o-mini" 这种带 Provider 前缀的写法，直接指定厂商模型。
ModelRegistry 在启动时一次性解析两个角色引用的所有模型，
并在进入对话循环前校验对应的 API 密钥是否存在。
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from llm_router.config.settings import settings as default_settings
from llm_router.domain.exceptions import CredentialError, UnknownModelError
from llm_router.providers.base import ModelCapability, ProviderClient


@dataclass
class ModelConfig:
    """单个逻辑模型的配置。"""

    logical_name: str
    provider_model: str
    default_temperature: float
    max_tokens: Optional[int] = None


@dataclass
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    base_url: str
    api_key_env: str
    models: Dict[str, ModelConfig]

    def settings_key(self) -> str:
        return self.api_key_env.lower()


OPENAI_CONFIG = ProviderConfig(
    name="openai",
    base_url="https://api.openai.com/v1",
    api_key_env="OPENAI_API_KEY",
    models={
        "chatgpt": ModelConfig(
            logical_name="chatgpt",
            provider_model="gpt-4o",
            default_temperature=0.0,
        )
    },
)

ANTHROPIC_CONFIG = ProviderConfig(
    name="anthropic",
    base_url="https://api.anthropic.com/v1",
    api_key_env="ANTHROPIC_API_KEY",
    models={
        "claude-3-sonnet": ModelConfig(
            logical_name="claude-3-sonnet",
            provider_model="claude-3-sonnet-20240229",
            default_temperature=0.3,
        )
    },
)


PROVIDER_REGISTRY: Mapping[str, ProviderConfig] = {
    "openai": OPENAI_CONFIG,
    "anthropic": ANTHROPIC_CONFIG,
}

# 带前缀的模型默认温度
_QUALIFIED_TEMPERATURE = 0.7


def get_provider_config(name: str) -> ProviderConfig:
    """根据名称获取 ProviderConfig，名称不区分大小写。"""

    key = name.lower()
    for k, cfg in PROVIDER_REGISTRY.items():
        if k.lower() == key:
            return cfg
    raise KeyError(f"Unknown provider: {name!r}")


def lookup_model(model_id: str) -> Tuple[ProviderConfig, ModelConfig]:
    """把逻辑模型名映射到 (ProviderConfig, ModelConfig)。"""

    for provider_cfg in PROVIDER_REGISTRY.values():
        if model_id in provider_cfg.models:
            return provider_cfg, provider_cfg.models[model_id]
    if ":" in model_id:
        provider_name, _, provider_model = model_id.partition(":")
        try:
            provider_cfg = get_provider_config(provider_name)
        except KeyError:
            provider_cfg = None
        if provider_cfg is not None and provider_model:
            return provider_cfg, ModelConfig(
                logical_name=model_id,
                provider_model=provider_model,
                default_temperature=_QUALIFIED_TEMPERATURE,
            )
    raise UnknownModelError(
        code="UNKNOWN_MODEL",
        message=f"Unknown model: {model_id!r}",
        model_id=model_id,
    )


class AgentDescriptorLike(Protocol):
    model_id: str


ClientFactory = Callable[[ProviderConfig, ModelConfig, object], ProviderClient]


def _default_factory(provider_cfg: ProviderConfig, model_cfg: ModelConfig, cfg) -> ProviderClient:
    from llm_router.providers.anthropic_client import AnthropicClient
    from llm_router.providers.openai_client import OpenAIClient

    if provider_cfg.name == "anthropic":
        return AnthropicClient(cfg, model_cfg)
    return OpenAIClient(cfg, model_cfg)


class ModelRegistry:
    """逻辑模型名 -> ModelCapability 的解析器。

    解析只检查注册表与凭据，不发起任何网络请求。
    """

    def __init__(self, cfg=None, client_factory: Optional[ClientFactory] = None):
        self._settings = cfg or default_settings
        self._factory = client_factory or _default_factory
        self._cache: Dict[str, ModelCapability] = {}

    def credential_for(self, model_id: str) -> Tuple[str, Optional[str]]:
        """返回 (环境变量名, 当前值)。"""

        provider_cfg, _ = lookup_model(model_id)
        value = getattr(self._settings, provider_cfg.settings_key(), None)
        return provider_cfg.api_key_env, (value or None)

    def resolve(self, model_id: str, role: Optional[str] = None) -> ModelCapability:
        if model_id in self._cache:
            return self._cache[model_id]
        provider_cfg, model_cfg = lookup_model(model_id)
        env_name, value = self.credential_for(model_id)
        if not value:
            raise CredentialError(missing=[(env_name, role or model_id)])
        capability = ModelCapability(model_id, self._factory(provider_cfg, model_cfg, self._settings))
        self._cache[model_id] = capability
        return capability

    def resolve_agents(self, agents: Mapping[str, AgentDescriptorLike]) -> Dict[str, ModelCapability]:
        """解析所有角色用到的模型；有问题时一次性列出全部缺口后再报错。"""

        unknown: List[str] = []
        missing: List[Tuple[str, str]] = []
        for role, descriptor in agents.items():
            try:
                env_name, value = self.credential_for(descriptor.model_id)
            except UnknownModelError:
                unknown.append(f"{descriptor.model_id!r} (agents.{role})")
                continue
            if not value:
                missing.append((env_name, role))
        if unknown:
            raise UnknownModelError(
                code="UNKNOWN_MODEL",
                message=f"Unknown model(s): {', '.join(unknown)}; known: {', '.join(known_models())}",
                models=unknown,
            )
        if missing:
            raise CredentialError(missing=missing)
        return {role: self.resolve(d.model_id, role) for role, d in agents.items()}


def known_models() -> List[str]:
    names: List[str] = []
    for provider_cfg in PROVIDER_REGISTRY.values():
        names.extend(provider_cfg.models)
    names.extend(f"{p}:<model>" for p in PROVIDER_REGISTRY)
    return names
