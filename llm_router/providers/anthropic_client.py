"""Anthropic Provider 适配器。

与 OpenAI 风格接口的主要差异：

1. 端点为 {base_url}/messages，认证头为 x-api-key，另需 anthropic-version。
2. system 提示词不放在 messages 里，而是单独的顶层 system 字段。
3. max_tokens 为必填。
4. 响应的 content 是分段列表，这里只拼接 type == "text" 的段落。
"""

from typing import Any, Dict, List

import httpx

from llm_router.config.settings import settings
from llm_router.domain.exceptions import ApiError, NetworkError, RateLimitError
from llm_router.domain.models import ChatChoice, ChatMessage, ChatRequest, ChatResult, ChatUsage
from llm_router.providers.registry import ANTHROPIC_CONFIG, ModelConfig


class AnthropicClient:
    """Anthropic Provider 客户端实现。"""

    name = "anthropic"

    def __init__(self, cfg=settings, model_cfg: ModelConfig | None = None):
        self._settings = cfg
        self._model_cfg = model_cfg

    def chat(self, req: ChatRequest) -> ChatResult:
        model_cfg = self._model_cfg or ANTHROPIC_CONFIG.models[req.model]
        payload = self._build_payload(req, model_cfg)
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                base = getattr(self._settings, "anthropic_base_url", None) or ANTHROPIC_CONFIG.base_url
                resp = client.post(
                    f"{base}/messages",
                    json=payload,
                    headers={
                        "x-api-key": self._settings.anthropic_api_key,
                        "anthropic-version": getattr(self._settings, "anthropic_version", "2023-06-01"),
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="Anthropic rate limit", provider=self.name)
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
        system_parts: List[str] = []
        messages: List[Dict[str, str]] = []
        for m in req.messages:
            if m.role == "system":
                system_parts.append(m.content)
            else:
                messages.append({"role": m.role, "content": m.content})
        payload: Dict[str, Any] = {
            "model": model_cfg.provider_model,
            "messages": messages,
            "max_tokens": req.max_tokens
            or model_cfg.max_tokens
            or getattr(self._settings, "anthropic_max_tokens", 4096),
            "temperature": req.temperature if req.temperature is not None else model_cfg.default_temperature,
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        blocks = data.get("content") or []
        text = "".join(b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text")
        message = ChatMessage(role="assistant", content=text)
        usage_raw = data.get("usage") or {}
        prompt_tokens = usage_raw.get("input_tokens", 0)
        completion_tokens = usage_raw.get("output_tokens", 0)
        usage = ChatUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        )
        return ChatResult(
            provider=self.name,
            model=req.model,
            choices=[ChatChoice(index=0, message=message, finish_reason=data.get("stop_reason"))],
            usage=usage,
        )
