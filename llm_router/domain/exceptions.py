"""统一异常模型。

所有跨模块抛出的错误都继承自 LLMRouterError，分两类：

- 启动期致命错误：ConfigError / CredentialError / StoreError，
  在进入对话循环之前由 CLI 捕获并以退出码 1 结束进程。
- 运行期错误：ProviderError 由 TurnExecutor 吸收为占位回复；
  PersistenceError 向上抛出，调用方必须感知写盘失败。
"""

from typing import List, Tuple


class LLMRouterError(Exception):
    """异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_READ_ERROR"）。
        message: 用户可读错误信息。
        extra: 其他补充字段（例如 role、model_id、provider 等）。
    """

    def __init__(self, code: str, message: str, **extra):
        self.code = code
        self.message = message
        self.extra = extra
        super().__init__(message)


class ConfigError(LLMRouterError):
    """配置文件缺失、格式错误或缺少必需字段。"""


class UnknownModelError(ConfigError):
    """配置引用了未注册的模型标识。"""


class CredentialError(LLMRouterError):
    """配置中用到的模型缺少对应的 API 密钥。

    missing 为 (环境变量名, 需要它的角色) 列表，便于一次性列出所有缺口。
    """

    def __init__(self, missing: List[Tuple[str, str]], code: str = "MISSING_CREDENTIAL"):
        self.missing = list(missing)
        details = ", ".join(f"{var} (required by {role})" for var, role in self.missing)
        super().__init__(code=code, message=f"Missing credentials: {details}")


class StoreError(LLMRouterError):
    """对话记忆文件无法读取或无法解析。"""


class PersistenceError(LLMRouterError):
    """追加消息后写盘失败。"""


class ProviderError(LLMRouterError):
    """模型调用失败的基类。"""


class NetworkError(ProviderError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(ProviderError):
    """第三方 API 返回非 2xx/429 错误时抛出。"""


class RateLimitError(ProviderError):
    """Provider 限流错误，由 TurnExecutor 负责重试/退避。"""
