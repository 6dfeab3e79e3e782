"""OpenAI 风格（chat completions）Provider 适配器。

本模块负责：

1. 把 CompletionRequest 转成 chat/completions 请求：messages 数组 +
   functions 工具列表 + 字符串形式的 function_call。
2. 把响应中的 choices[0].message / finish_reason 解析成统一的
   ProviderResponse（含工具调用）。每个回复最多一个工具调用，
   以便下一轮请求能用 function_call 原样回放。

本地 Ollama daemon 复用同样的 JSON 结构，见 ollama_client。
"""

import copy
import json
from typing import Any, Dict, List, Optional

from agent_relay.domain.models import CompletionRequest, ProviderKind, ProviderResponse, Turn
from agent_relay.providers.base import ProviderAdapter, WireRequest
from agent_relay.tools.definitions import ToolCall, ToolDescriptor


_FINISH_REASONS = {
    "stop": "stop",
    "function_call": "tool_call",
    "tool_calls": "tool_call",
    "length": "length",
    "content_filter": "error",
}


class OpenAIAdapter(ProviderAdapter):
    """completions 风格的适配器，Bearer token 认证。"""

    kind = ProviderKind.OPENAI

    def render(self, req: CompletionRequest) -> WireRequest:
        return WireRequest(
            url=self._provider_cfg.endpoint(self._model(req)),
            body=self._build_payload(req),
            headers=self._headers(),
        )

    def parse(self, data: Any) -> ProviderResponse:
        """将 choices[0] 解析为统一的 ProviderResponse。"""

        if not isinstance(data, dict):
            raise self._malformed("response body is not an object")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self._malformed("response has no choices")
        choice = choices[0]
        if not isinstance(choice, dict) or not isinstance(choice.get("message"), dict):
            raise self._malformed("choices[0].message is missing")
        turn = self._build_turn(choice["message"])

        raw_reason = choice.get("finish_reason")
        if raw_reason is not None and not isinstance(raw_reason, str):
            raise self._malformed("finish_reason is not a string")
        finish_reason = _FINISH_REASONS.get(raw_reason)
        if finish_reason is None and turn.tool_calls:
            finish_reason = "tool_call"
        return ProviderResponse(reply_turn=turn, finish_reason=finish_reason)

    # ---- 辅助方法 ----

    def _model(self, req: CompletionRequest) -> str:
        return req.model

    def _headers(self) -> Dict[str, str]:
        return self._bearer_headers()

    def _build_payload(self, req: CompletionRequest) -> dict:
        payload: Dict[str, Any] = {
            "model": self._model(req),
            "messages": [self._turn_to_payload(t) for t in req.history],
            "max_tokens": req.max_tokens,
            "temperature": req.temperature,
        }
        # 工具调用：没有工具时不能单独发送 function_call
        if req.tools:
            payload["functions"] = [self._serialize_tool(tool) for tool in req.tools]
            payload["function_call"] = self._function_call(req)
        return payload

    @staticmethod
    def _function_call(req: CompletionRequest):
        if req.tool_choice == "forced":
            return {"name": req.forced_tool}
        return req.tool_choice

    @staticmethod
    def _serialize_tool(tool: ToolDescriptor) -> Dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description,
            "parameters": copy.deepcopy(tool.parameters),
        }

    @staticmethod
    def _turn_to_payload(turn: Turn) -> Dict[str, Any]:
        if turn.role == "tool":
            # 旧版 function calling 协议中，工具结果以 role=function 回传
            return {"role": "function", "name": turn.name, "content": turn.content}
        payload: Dict[str, Any] = {"role": turn.role, "content": turn.content}
        if turn.tool_calls:
            call = turn.tool_calls[0]
            payload["content"] = turn.content or None
            payload["function_call"] = {
                "name": call.name,
                "arguments": json.dumps(call.arguments, ensure_ascii=False),
            }
        return payload

    def _build_turn(self, message: Dict[str, Any]) -> Turn:
        """将单条厂商 message 转换为 Turn。

        同时负责把 function_call / tool_calls 字段解析为统一的 ToolCall 列表。
        """

        tool_calls = self._parse_tool_calls(message)
        content = message.get("content")
        if content is None and tool_calls:
            content = ""
        role = message.get("role")
        name = message.get("name") if role == "tool" else None
        return self._reply_turn(role, content, name=name, tool_calls=tool_calls)

    def _parse_tool_calls(self, message: Dict[str, Any]) -> List[ToolCall]:
        tool_calls: List[ToolCall] = []
        function_call = message.get("function_call")
        if isinstance(function_call, dict):
            tool_calls.append(
                ToolCall(
                    id=function_call.get("id") or "function_call",
                    name=function_call.get("name") or "",
                    arguments=self._parse_arguments(function_call.get("arguments")),
                )
            )
        raw_calls = message.get("tool_calls")
        if raw_calls is None:
            raw_calls = []
        if not isinstance(raw_calls, list):
            raise self._malformed("tool_calls is not a list")
        for idx, call in enumerate(raw_calls):
            if not isinstance(call, dict):
                raise self._malformed("tool_calls entry is not an object")
            func = call.get("function")
            if not isinstance(func, dict):
                func = {}
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"tool_call_{idx}",
                    name=func.get("name") or call.get("name") or "",
                    arguments=self._parse_arguments(func.get("arguments")),
                )
            )
        # function_call 协议每轮只能回放一个调用，多于一个时历史无法原样回传
        if len(tool_calls) > 1:
            raise self._malformed(f"expected at most one tool call per reply, got {len(tool_calls)}")
        return tool_calls

    @staticmethod
    def _parse_arguments(raw: Any) -> Dict[str, Any]:
        """解析工具调用的 arguments 字段。

        OpenAI 会把 arguments 作为 JSON 字符串返回，这里做一层
        json.loads 尝试，失败时保留原始字符串到 `_raw`，避免信息丢失。
        """

        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            try:
                parsed: Optional[Any] = json.loads(raw)
            except json.JSONDecodeError:
                return {"_raw": raw}
            return parsed if isinstance(parsed, dict) else {"_raw": raw}
        return {}
