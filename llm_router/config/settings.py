"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载进程级设置。
Agent 角色配置（builder / judge）单独放在 agents 模块中读取。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SEED_PROMPT = "Let's build a website together. What's the best way to start?"


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("LLM_ROUTER_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """进程级配置（使用 Pydantic）。"""

    # ---- Provider 凭据 ----
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI API 基础URL",
    )
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API 密钥")
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        description="Anthropic API 基础URL",
    )
    anthropic_version: str = Field(default="2023-06-01", description="anthropic-version 请求头")
    anthropic_max_tokens: int = Field(
        default=4096,
        ge=1,
        description="Anthropic messages 接口必填的 max_tokens",
    )
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 文件位置 ----
    agents_config_path: str = Field(
        default=".mcp.config.json",
        description="builder / judge 角色配置文件（JSON 或 YAML）",
    )
    memory_path: str = Field(default="memory/history.json", description="对话记忆文件")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否截断日志内容")

    # ---- 对话循环 ----
    turn_delay_ms: int = Field(default=500, ge=0, description="builder 与 judge 之间的停顿（毫秒）")
    provider_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="限流/网络错误的最大重试次数",
    )
    provider_retry_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="首次重试前的等待秒数，之后按 2 倍递增",
    )
    seed_prompt: str = Field(default=DEFAULT_SEED_PROMPT, description="空记忆时的第一条人类消息")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
