"""统一的对话与请求/响应数据模型。

本模块定义了 Agent 内部在不同 Provider 之间共享的标准数据结构：

- Turn: 一条对话消息（system/user/assistant/tool）。
- CompletionRequest: 发给底层 LLM Provider 的完整请求（与厂商无关）。
- ProviderResponse: 从 Provider 解析后的统一响应结果。
- AgentConfig: 启动时构造一次、之后只读的 Agent 配置快照。

所有 Provider 适配器都必须只依赖这些模型，
并负责在各自的 API JSON 和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, Tuple, TYPE_CHECKING

from agent_relay.domain.exceptions import ValidationError

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from agent_relay.tools.definitions import ToolCall, ToolDescriptor


# LLM 消息角色类型（与 OpenAI 等厂商的 role 字段对应）
Role = Literal["system", "user", "assistant", "tool"]
ROLES = ("system", "user", "assistant", "tool")

FinishReason = Literal["stop", "tool_call", "length", "error"]

# auto: 由模型决定；none: 禁止调用工具；forced: 必须调用 forced_tool
ToolChoice = Literal["auto", "none", "forced"]


@dataclass(frozen=True)
class Turn:
    """一条对话消息，创建后不可修改。

    - name: 仅当 role 为 "tool" 时设置，表示产生该结果的工具名。
    - tool_calls: 当 role 为 "assistant" 且模型触发工具调用时，
      这里保存模型发起的工具调用列表。
    """

    role: Role
    content: str
    name: Optional[str] = None
    tool_calls: Tuple["ToolCall", ...] = ()

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValidationError(code="INVALID_TURN", message=f"unknown role: {self.role!r}")
        if not isinstance(self.content, str):
            raise ValidationError(code="INVALID_TURN", message="turn content must be a string")
        if self.name is not None and self.role != "tool":
            raise ValidationError(code="INVALID_TURN", message="only tool turns may carry a name")
        if self.tool_calls and self.role != "assistant":
            raise ValidationError(code="INVALID_TURN", message="only assistant turns may carry tool calls")
        # 允许传入 list，统一转成 tuple 保证不可变
        object.__setattr__(self, "tool_calls", tuple(self.tool_calls))


@dataclass(frozen=True)
class CompletionRequest:
    """一次完整的补全请求。

    Agent 用当前历史快照和全部工具定义生成 CompletionRequest，
    再交给具体 ProviderAdapter 渲染成各家 API 的 JSON 请求体。
    """

    model: str
    history: Tuple[Turn, ...]
    tools: Tuple["ToolDescriptor", ...] = ()
    tool_choice: ToolChoice = "auto"
    forced_tool: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if self.max_tokens < 1:
            raise ValidationError(code="INVALID_REQUEST", message="max_tokens must be positive")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValidationError(code="INVALID_REQUEST", message="temperature must be within [0, 2]")
        if (self.tool_choice == "forced") != (self.forced_tool is not None):
            raise ValidationError(
                code="INVALID_REQUEST",
                message="forced_tool must be set exactly when tool_choice is 'forced'",
            )


@dataclass(frozen=True)
class ProviderResponse:
    """一次 Provider 调用解析后的统一结果。"""

    reply_turn: Turn
    finish_reason: Optional[FinishReason] = None

    @property
    def tool_calls(self) -> Tuple["ToolCall", ...]:
        return self.reply_turn.tool_calls


class ProviderKind(str, Enum):
    """可选的 Provider 类型。"""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    GOOGLE = "google"

    @classmethod
    def parse(cls, name: Optional[str]) -> "ProviderKind":
        """按名称解析 Provider，不区分大小写；未知名称回退到 openai。"""

        key = (name or "").strip().lower()
        key = _PROVIDER_ALIASES.get(key, key)
        for kind in cls:
            if kind.value == key:
                return kind
        return cls.OPENAI


_PROVIDER_ALIASES = {
    "claude": "anthropic",
    "gemini": "google",
    "palm": "google",
}


@dataclass(frozen=True)
class Credentials:
    """Provider 凭据。repr 中不输出明文 key。"""

    api_key: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(api_key={'***' if self.api_key else None})"


@dataclass(frozen=True)
class AgentConfig:
    """Agent 配置快照。

    由 load_agent_config 在启动时构造一次，之后按值传给每个 Agent
    （包括批处理中新建的 Agent），任何时候都不会被修改。
    """

    provider_kind: ProviderKind
    model_name: str
    max_tokens: int = 1024
    temperature: float = 0.7
    retry_count: int = 3
    backoff_base_ms: int = 500
    credentials: Credentials = field(default_factory=Credentials)
    http_timeout: float = 30.0
    system_prompt: str = ""
    batch_max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.retry_count < 1:
            raise ValidationError(code="INVALID_CONFIG", message="retry_count must be at least 1")
        if self.backoff_base_ms < 0:
            raise ValidationError(code="INVALID_CONFIG", message="backoff_base_ms must not be negative")
        if self.max_tokens < 1:
            raise ValidationError(code="INVALID_CONFIG", message="max_tokens must be positive")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValidationError(code="INVALID_CONFIG", message="temperature must be within [0, 2]")
        if self.batch_max_workers is not None and self.batch_max_workers < 1:
            raise ValidationError(code="INVALID_CONFIG", message="batch_max_workers must be at least 1")
