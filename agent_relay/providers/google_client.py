"""Google generateMessage 接口适配器。

与其他三家不同：
- 认证通过 URL query 参数 ?key=...，不使用 Bearer 头。
- messages 使用 {author, content} 结构（role 改名为 author）。
- 不支持 tools / max_tokens / temperature，这些字段一律不发送。
- 回复取 candidates[0]。
"""

from typing import Any

from agent_relay.domain.models import CompletionRequest, ProviderKind, ProviderResponse
from agent_relay.providers.base import ProviderAdapter, WireRequest


class GoogleAdapter(ProviderAdapter):
    kind = ProviderKind.GOOGLE

    def render(self, req: CompletionRequest) -> WireRequest:
        return WireRequest(
            url=self._provider_cfg.endpoint(req.model),
            body={"messages": [{"author": turn.role, "content": turn.content} for turn in req.history]},
            headers={"Content-Type": "application/json"},
            params={"key": self._config.credentials.api_key or ""},
        )

    def parse(self, data: Any) -> ProviderResponse:
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise self._malformed("response has no candidates")
        first = candidates[0]
        if not isinstance(first, dict):
            raise self._malformed("candidates[0] is not an object")
        turn = self._reply_turn("assistant", first.get("content"))
        return ProviderResponse(reply_turn=turn, finish_reason="stop")
