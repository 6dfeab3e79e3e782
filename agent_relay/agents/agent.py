"""Agent 核心模块。

一个 Agent 独占一份 ConversationState，负责：构造 CompletionRequest、
调用 ProviderAdapter + RetryingTransport、把回复追加进历史，
以及在模型请求工具时等待（或驱动）外部工具层回填结果。

状态机：
    IDLE -> AWAITING_PROVIDER_REPLY -> IDLE
                                    -> AWAITING_TOOL_RESULT -> IDLE
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from agent_relay.domain.conversation import ConversationState
from agent_relay.domain.exceptions import ProviderError, ValidationError
from agent_relay.domain.models import AgentConfig, CompletionRequest, ProviderResponse, ToolChoice, Turn
from agent_relay.infrastructure.logging.logger import logger
from agent_relay.providers import ProviderAdapter, RetryingTransport, create_adapter
from agent_relay.tools.catalog import ToolCatalog, default_catalog
from agent_relay.tools.definitions import ToolCall
from agent_relay.tools.executor import ToolExecutor


class AgentState(str, Enum):
    IDLE = "idle"
    AWAITING_PROVIDER_REPLY = "awaiting_provider_reply"
    AWAITING_TOOL_RESULT = "awaiting_tool_result"


class Agent:
    def __init__(
        self,
        config: AgentConfig,
        catalog: Optional[ToolCatalog] = None,
        adapter: Optional[ProviderAdapter] = None,
        transport: Optional[RetryingTransport] = None,
        history: Optional[ConversationState] = None,
    ):
        self._config = config
        self._catalog = catalog if catalog is not None else default_catalog()
        self._adapter = adapter or create_adapter(config)
        self._transport = transport or RetryingTransport.from_config(config)
        self._history = history if history is not None else ConversationState.start(config.system_prompt)
        self._state = AgentState.IDLE
        self._pending: List[ToolCall] = []
        self._log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "provider": self._adapter.name,
        }

    @classmethod
    def for_prompt(
        cls,
        config: AgentConfig,
        prompt: str,
        catalog: Optional[ToolCatalog] = None,
        system_turn: Optional[Turn] = None,
        **kwargs: Any,
    ) -> "Agent":
        """创建只含 system + user 两条消息的全新 Agent（批处理使用）。"""

        system_turn = system_turn or Turn(role="system", content=config.system_prompt)
        history = ConversationState([system_turn, Turn(role="user", content=prompt)])
        return cls(config, catalog=catalog, history=history, **kwargs)

    # ---- 只读属性 ----

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def history(self) -> Tuple[Turn, ...]:
        return self._history.snapshot()

    @property
    def pending_tool_calls(self) -> Tuple[ToolCall, ...]:
        return tuple(self._pending)

    # ---- 会话操作 ----

    def add_user_message(self, content: str) -> Turn:
        self._require_idle()
        turn = Turn(role="user", content=content)
        self._history.append(turn)
        return turn

    def add_tool_result(self, name: str, content: str) -> Turn:
        """把外部工具层的执行结果作为 tool 消息追加到历史。"""

        if self._state is AgentState.AWAITING_PROVIDER_REPLY:
            raise ValidationError(code="AGENT_BUSY", message="request in flight")
        if self._state is AgentState.AWAITING_TOOL_RESULT:
            match = next((c for c in self._pending if c.name == name), None)
            if match is None:
                raise ValidationError(code="UNEXPECTED_TOOL_RESULT", message=f"no pending call for tool {name!r}")
            self._pending.remove(match)
        turn = Turn(role="tool", content=content, name=name)
        self._history.append(turn)
        if not self._pending:
            self._state = AgentState.IDLE
        return turn

    def send_request(self, forced_tool_name: Optional[str] = None) -> Turn:
        """发送一次请求并把回复追加到历史。

        Args:
            forced_tool_name: 强制模型调用的工具名；为空时由模型自行决定（auto）。

        Returns:
            追加到历史的回复 Turn。

        Raises:
            ProviderError: 传输重试耗尽（TransportError）、4xx（ApiError）
                或响应无法解析（MalformedResponse）；此时历史保持不变。
            ValidationError: 工具名不在目录中，或仍有待回填的工具结果。
        """

        if forced_tool_name is not None:
            if forced_tool_name not in self._catalog:
                raise ValidationError(code="UNKNOWN_TOOL", message=f"tool not in catalog: {forced_tool_name}")
            return self._send("forced", forced_tool_name)
        return self._send("auto", None)

    def run_tool_loop(self, executor: ToolExecutor, max_rounds: int = 20) -> Turn:
        """多轮工具调用循环。

        1. 调用 provider；
        2. 如果回复请求了工具，交给 executor 执行并回填结果；
        3. 重复，直到回复不再请求工具或达到 max_rounds；
        4. 达到上限时以 tool_choice=none 再请求一次，强制得到文本回答。
        """

        reply = self.send_request()
        rounds = 0
        while self._pending and rounds < max_rounds:
            rounds += 1
            self._log(logging.INFO, "Tool round", round=rounds, max_rounds=max_rounds, call_count=len(self._pending))
            for call in list(self._pending):
                result = executor.execute(call)
                self.add_tool_result(call.name, result.content)
            reply = self.send_request()

        if self._pending:
            self._log(logging.WARNING, "Reached max tool rounds", max_rounds=max_rounds)
            for call in list(self._pending):
                self.add_tool_result(call.name, "Error: tool round limit reached")
            reply = self._send("none", None)
        return reply

    # ---- 内部实现 ----

    def _send(self, tool_choice: ToolChoice, forced_tool: Optional[str]) -> Turn:
        if self._pending:
            raise ValidationError(code="TOOL_RESULT_PENDING", message="pending tool calls must be answered first")
        self._require_idle()
        request = CompletionRequest(
            model=self._config.model_name,
            history=self._history.snapshot(),
            tools=self._catalog.describe_all(),
            tool_choice=tool_choice,
            forced_tool=forced_tool,
            max_tokens=self._config.max_tokens,
            temperature=self._config.temperature,
        )
        self._log(
            logging.INFO,
            "Calling provider",
            model=request.model,
            message_count=len(request.history),
            tool_choice=tool_choice,
        )

        self._state = AgentState.AWAITING_PROVIDER_REPLY
        try:
            response = self._call_provider(request)
        except ProviderError as e:
            self._log(logging.ERROR, "Provider call failed", error_code=e.code, error=e.message)
            raise
        finally:
            self._state = AgentState.IDLE

        reply = response.reply_turn
        self._history.append(reply)
        if reply.tool_calls:
            self._pending = list(reply.tool_calls)
            self._state = AgentState.AWAITING_TOOL_RESULT
        self._log(
            logging.INFO,
            "Appended reply",
            role=reply.role,
            finish_reason=response.finish_reason,
            tool_calls=[c.name for c in reply.tool_calls],
            history_length=len(self._history),
        )
        return reply

    def _call_provider(self, request: CompletionRequest) -> ProviderResponse:
        wire = self._adapter.render(request)
        data = self._transport.execute(wire)
        return self._adapter.parse(data)

    def _require_idle(self) -> None:
        if self._state is not AgentState.IDLE:
            raise ValidationError(code="AGENT_BUSY", message=f"agent is {self._state.value}")

    def _log(self, level: int, message: str, **fields: Any) -> None:
        payload = dict(self._log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
