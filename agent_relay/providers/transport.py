"""带指数退避的 HTTP 传输层。

只负责“把 WireRequest 发出去并拿回 JSON”：
- 传输层失败（连接错误、超时、429、5xx、响应体不是 JSON）按
  backoff_base_ms * 2**attempt 毫秒退避后重试，最多 retry_count 次尝试。
- 其他 4xx 直接抛出 ApiError，不重试。
- 成功拿到 JSON 即返回；响应内容是否合法由上层 ProviderAdapter.parse 判断，
  解析失败绝不会触发重发。

退避没有随机抖动，给定 attempt 即可确定等待时间，便于测试。
"""

import time
from typing import Any, Callable, Optional

import httpx
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from agent_relay.domain.exceptions import ApiError, RateLimitError, TransportError, ValidationError
from agent_relay.domain.models import AgentConfig
from agent_relay.infrastructure.logging.logger import logger
from agent_relay.providers.base import WireRequest


class RetryingTransport:
    def __init__(
        self,
        retry_count: int = 3,
        backoff_base_ms: int = 500,
        timeout: float = 30.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        if retry_count < 1:
            raise ValidationError(code="INVALID_CONFIG", message="retry_count must be at least 1")
        self._retry_count = retry_count
        self._backoff_base_ms = backoff_base_ms
        self._timeout = timeout
        self._sleep = sleep or time.sleep

    @classmethod
    def from_config(cls, config: AgentConfig, sleep: Optional[Callable[[float], None]] = None) -> "RetryingTransport":
        return cls(
            retry_count=config.retry_count,
            backoff_base_ms=config.backoff_base_ms,
            timeout=config.http_timeout,
            sleep=sleep,
        )

    def execute(self, wire: WireRequest) -> Any:
        """发送请求，返回解码后的 JSON。最后一次尝试的错误原样抛出。"""

        retrying = Retrying(
            stop=stop_after_attempt(self._retry_count),
            wait=wait_exponential(multiplier=self._backoff_base_ms / 1000.0, exp_base=2, min=0),
            retry=retry_if_exception_type(TransportError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(self._send_once, wire)

    def _send_once(self, wire: WireRequest) -> Any:
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                resp = client.post(
                    wire.url,
                    json=wire.body,
                    headers=wire.headers,
                    params=wire.params or None,
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise TransportError(code="NETWORK_ERROR", message=str(e) or type(e).__name__)
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message="provider rate limit", http_status=429)
        if resp.status_code >= 500:
            raise TransportError(code="SERVER_ERROR", message=resp.text, http_status=resp.status_code)
        if resp.status_code >= 400:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(code="INVALID_BODY", message=f"response body is not JSON: {e}")

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Transport attempt failed, retrying",
            extra={
                "extra": {
                    "attempt": retry_state.attempt_number - 1,
                    "delay_ms": int(round(delay * 1000)),
                    "error_code": getattr(exc, "code", None),
                    "error": str(exc),
                }
            },
        )
