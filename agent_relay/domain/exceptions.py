"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在调用方或批处理层做统一捕获与日志记录。

Provider 调用相关的错误分两类：
- TransportError 及其子类：传输层失败，由 RetryingTransport 负责重试。
- ApiError / MalformedResponse：请求已送达但结果不可用，永不重试。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "NETWORK_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、attempts 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ProviderError(BusinessError):
    """一次 Provider 调用失败的基类。"""


class TransportError(ProviderError):
    """传输层错误：连接失败、超时、5xx、响应体不是 JSON 等，可重试。"""


class RateLimitError(TransportError):
    """Provider 限流（HTTP 429），按传输层错误退避重试。"""


class ApiError(ProviderError):
    """第三方 API 返回 4xx（429 除外）时抛出，不重试。"""


class MalformedResponse(ProviderError):
    """HTTP 成功但响应结构不符合预期（缺字段、类型不符）。"""


class ConfigurationError(BusinessError):
    """启动时缺少必需的配置项（例如所选 Provider 的 API key）。"""


class ValidationError(BusinessError):
    """参数或状态校验失败。"""
