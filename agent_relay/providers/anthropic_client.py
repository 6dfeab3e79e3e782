"""Anthropic 旧版 complete 接口适配器。

该接口只接受一段纯文本 prompt：
- 所有历史消息被拼接为 "[role] content" 形式的多行文本。
- 不支持工具定义，请求中的 tools 会被静默忽略（能力缺口，不是错误）。
- 响应只有 completion 文本字段，没有工具调用。
"""

from typing import Any

from agent_relay.domain.models import CompletionRequest, ProviderKind, ProviderResponse
from agent_relay.providers.base import ProviderAdapter, WireRequest


class AnthropicAdapter(ProviderAdapter):
    kind = ProviderKind.ANTHROPIC

    def render(self, req: CompletionRequest) -> WireRequest:
        transcript = "\n".join(f"[{turn.role}] {turn.content}" for turn in req.history)
        return WireRequest(
            url=self._provider_cfg.endpoint(req.model),
            body={
                "model": req.model,
                "prompt": transcript,
                "max_tokens_to_sample": req.max_tokens,
            },
            headers=self._bearer_headers(),
        )

    def parse(self, data: Any) -> ProviderResponse:
        if not isinstance(data, dict) or not isinstance(data.get("completion"), str):
            raise self._malformed("response has no completion text")
        turn = self._reply_turn("assistant", data["completion"])
        return ProviderResponse(reply_turn=turn, finish_reason="stop")
