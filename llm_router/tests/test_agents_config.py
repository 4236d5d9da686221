import json

import pytest

from llm_router.config.agents import load_agents_config, parse_agents_config
from llm_router.domain.exceptions import ConfigError


VALID = {
    "agents": {
        "builder": {"model": "chatgpt", "persona": "Builder", "rolePrompt": "Build things."},
        "judge": {"model": "claude-3-sonnet", "persona": "Judge", "rolePrompt": "Judge things."},
    }
}


def test_load_json_config(tmp_path):
    path = tmp_path / ".mcp.config.json"
    path.write_text(json.dumps(VALID), encoding="utf-8")
    cfg = load_agents_config(path)
    assert cfg.builder.model_id == "chatgpt"
    assert cfg.builder.role == "builder"
    assert cfg.judge.persona == "Judge"
    assert cfg.judge.role_prompt == "Judge things."


def test_load_yaml_config(tmp_path):
    path = tmp_path / "agents.yaml"
    path.write_text(
        "agents:\n"
        "  builder: {model: chatgpt, persona: B, rolePrompt: build}\n"
        "  judge: {model: 'anthropic:claude-3-5-sonnet-latest', persona: J, rolePrompt: judge}\n",
        encoding="utf-8",
    )
    cfg = load_agents_config(path)
    assert cfg.judge.model_id == "anthropic:claude-3-5-sonnet-latest"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError) as exc:
        load_agents_config(tmp_path / "nope.json")
    assert exc.value.code == "CONFIG_NOT_FOUND"


def test_invalid_json(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        load_agents_config(path)
    assert exc.value.code == "CONFIG_INVALID"


def test_missing_role():
    data = {"agents": {"builder": VALID["agents"]["builder"]}}
    with pytest.raises(ConfigError) as exc:
        parse_agents_config(data)
    assert exc.value.code == "CONFIG_MISSING_ROLE"
    assert "judge" in exc.value.message


def test_missing_field():
    data = json.loads(json.dumps(VALID))
    del data["agents"]["judge"]["rolePrompt"]
    data["agents"]["judge"]["model"] = "  "
    with pytest.raises(ConfigError) as exc:
        parse_agents_config(data)
    assert "agents.judge.rolePrompt" in exc.value.message
    assert "agents.judge.model" in exc.value.message


def test_agents_not_a_mapping():
    with pytest.raises(ConfigError):
        parse_agents_config({"agents": ["builder", "judge"]})
