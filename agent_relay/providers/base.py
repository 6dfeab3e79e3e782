"""Provider 抽象接口。

上层 Agent 不直接依赖具体厂商的 HTTP 格式，而是依赖此基类：

- 每个厂商实现一个 ProviderAdapter 子类（如 OpenAIAdapter）。
- render(req): 把统一的 CompletionRequest 转成 WireRequest（URL、JSON、认证）。
- parse(data): 把响应 JSON 解析为统一的 ProviderResponse。

两个方法都是纯函数：不做 I/O，不修改入参。真正的 HTTP 调用与重试
由 RetryingTransport 负责，因此解析失败永远不会触发重发。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from agent_relay.domain.exceptions import MalformedResponse, ValidationError
from agent_relay.domain.models import AgentConfig, CompletionRequest, ProviderKind, ProviderResponse, Turn
from agent_relay.providers.registry import ProviderConfig, get_provider_config


@dataclass(frozen=True)
class WireRequest:
    """渲染好的 HTTP 请求：POST url?params，body 以 JSON 发送。"""

    url: str
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


class ProviderAdapter:
    """LLM Provider 适配器基类。

    子类需要设置 kind，并实现 render / parse。
    """

    kind: ProviderKind

    def __init__(self, config: AgentConfig):
        self._config = config
        self._provider_cfg: ProviderConfig = get_provider_config(self.kind)

    @property
    def name(self) -> str:
        return self.kind.value

    def render(self, req: CompletionRequest) -> WireRequest:
        raise NotImplementedError

    def parse(self, data: Any) -> ProviderResponse:
        raise NotImplementedError

    # ---- 子类共用的辅助方法 ----

    def _bearer_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.credentials.api_key or ''}",
            "Content-Type": "application/json",
        }

    def _malformed(self, message: str) -> MalformedResponse:
        return MalformedResponse(code="MALFORMED_RESPONSE", message=message, provider=self.name)

    def _reply_turn(self, role: Any, content: Any, name: Optional[str] = None, tool_calls=()) -> Turn:
        """构造回复 Turn，任何不符合 Turn 约束的字段都视为响应格式错误。"""

        if role not in ("assistant", "tool"):
            raise self._malformed(f"unexpected reply role: {role!r}")
        if not isinstance(content, str):
            raise self._malformed("reply content is not a string")
        try:
            return Turn(role=role, content=content, name=name, tool_calls=tool_calls)
        except ValidationError as e:
            raise self._malformed(e.message)
