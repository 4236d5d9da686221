"""Agent 角色配置加载。

配置文件只描述两个固定角色：

    {
      "agents": {
        "builder": {"model": "chatgpt", "persona": "Builder", "rolePrompt": "..."},
        "judge":   {"model": "claude-3-sonnet", "persona": "Judge", "rolePrompt": "..."}
      }
    }

后缀为 .yaml / .yml 时按 YAML 解析，其余按 JSON 解析。
任何缺失或格式问题都抛出 ConfigError，属于启动期致命错误。
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from llm_router.domain.exceptions import ConfigError


ROLES = ("builder", "judge")
_REQUIRED_FIELDS = {"model": "model_id", "persona": "persona", "rolePrompt": "role_prompt"}


@dataclass(frozen=True)
class AgentDescriptor:
    """单个角色的静态描述，进程生命周期内不可变。"""

    role: str
    model_id: str
    persona: str
    role_prompt: str


@dataclass(frozen=True)
class AgentsConfig:
    builder: AgentDescriptor
    judge: AgentDescriptor

    def as_dict(self) -> Dict[str, AgentDescriptor]:
        return {"builder": self.builder, "judge": self.judge}


def load_agents_config(path: Union[str, Path]) -> AgentsConfig:
    """读取并校验角色配置文件。"""

    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise ConfigError(
            code="CONFIG_NOT_FOUND",
            message=f"Agent configuration file not found: {cfg_path}",
            path=str(cfg_path),
        )
    try:
        text = cfg_path.read_text(encoding="utf-8")
        if cfg_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(
            code="CONFIG_INVALID",
            message=f"Cannot parse {cfg_path}: {e}",
            path=str(cfg_path),
        )
    return parse_agents_config(data, source=str(cfg_path))


def parse_agents_config(data: Any, source: str = "<config>") -> AgentsConfig:
    if not isinstance(data, dict) or not isinstance(data.get("agents"), dict):
        raise ConfigError(
            code="CONFIG_INVALID",
            message=f"{source}: expected an object with an 'agents' mapping",
        )
    agents = data["agents"]
    missing_roles = [r for r in ROLES if r not in agents]
    if missing_roles:
        raise ConfigError(
            code="CONFIG_MISSING_ROLE",
            message=f"{source}: missing agent role(s): {', '.join(missing_roles)}",
            roles=missing_roles,
        )
    builder = _parse_descriptor("builder", agents["builder"], source)
    judge = _parse_descriptor("judge", agents["judge"], source)
    return AgentsConfig(builder=builder, judge=judge)


def _parse_descriptor(role: str, raw: Any, source: str) -> AgentDescriptor:
    if not isinstance(raw, dict):
        raise ConfigError(
            code="CONFIG_INVALID",
            message=f"{source}: agents.{role} must be an object",
            role=role,
        )
    values: Dict[str, str] = {}
    problems = []
    for key, attr in _REQUIRED_FIELDS.items():
        value = raw.get(key)
        if not isinstance(value, str) or not value.strip():
            problems.append(f"agents.{role}.{key}")
            continue
        values[attr] = value
    if problems:
        raise ConfigError(
            code="CONFIG_MISSING_FIELD",
            message=f"{source}: missing or empty field(s): {', '.join(problems)}",
            role=role,
        )
    return AgentDescriptor(role=role, **values)
