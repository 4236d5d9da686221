"""OpenAI Provider 适配器。

使用 chat/completions 端点：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>

本实现只依赖公共字段：model/messages/temperature/max_tokens。
"""

from typing import Any, Dict

import httpx

from llm_router.config.settings import settings
from llm_router.domain.exceptions import ApiError, NetworkError, RateLimitError
from llm_router.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from llm_router.providers.registry import OPENAI_CONFIG, ModelConfig


class OpenAIClient:
    """OpenAI Provider 客户端实现。"""

    name = "openai"

    def __init__(self, cfg=settings, model_cfg: ModelConfig | None = None):
        self._settings = cfg
        self._model_cfg = model_cfg

    def chat(self, req: ChatRequest) -> ChatResult:
        model_cfg = self._model_cfg or OPENAI_CONFIG.models[req.model]
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                base = getattr(self._settings, "openai_base_url", None) or OPENAI_CONFIG.base_url
                resp = client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.openai_api_key}",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            # DNS 失败、连接超时、读超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="OpenAI rate limit", provider=self.name)
        if resp.status_code >= 400:
            raise ApiError(
                code="API_ERROR",
                message=f"HTTP {resp.status_code}: {resp.text}",
                provider=self.name,
                http_status=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="API_BAD_RESPONSE", message=f"Invalid JSON response: {e}", provider=self.name)
        if not isinstance(data, dict):
            raise ApiError(
                code="API_BAD_RESPONSE",
                message=f"Unexpected response body: {type(data).__name__}",
                provider=self.name,
            )
        try:
            result = self._parse_response(data, req)
            text = result.content.strip()
        except (AttributeError, TypeError, KeyError) as e:
            # 字段类型与约定不符（如 choices 里混入字符串）
            raise ApiError(code="API_BAD_RESPONSE", message=f"Malformed response: {e}", provider=self.name)
        if not text:
            raise ApiError(code="API_EMPTY_RESPONSE", message="Model returned no text", provider=self.name)
        return result

    def _build_payload(self, req: ChatRequest, model_cfg: ModelConfig) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model_cfg.provider_model,
            "messages": [{"role": m.role, "content": m.content} for m in req.messages],
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
        }
        max_tokens = req.max_tokens or model_cfg.max_tokens
        if max_tokens:
            payload["max_tokens"] = max_tokens
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        choices: list[ChatChoice] = []
        for i, ch in enumerate(data.get("choices", [])):
            msg = ch.get("message") or {}
            choices.append(
                ChatChoice(
                    index=ch.get("index", i),
                    message=ChatMessage(role="assistant", content=msg.get("content") or ""),
                    finish_reason=ch.get("finish_reason"),
                )
            )
        usage_raw = data.get("usage") or {}
        usage = ChatUsage(
            prompt_tokens=usage_raw.get("prompt_tokens", 0),
            completion_tokens=usage_raw.get("completion_tokens", 0),
            total_tokens=usage_raw.get("total_tokens", 0),
        )
        return ChatResult(provider=self.name, model=req.model, choices=choices, usage=usage)
