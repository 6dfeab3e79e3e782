"""工具层边界。

具体工具（读写文件、执行命令、抓取 URL 等）由外部注册进来，
这里只负责按名称分发，并把任何失败都转换成普通的文本结果，
保证工具错误不会以异常的形式打断 Agent 的对话流程。
"""

from typing import Any, Callable, Dict

from agent_relay.infrastructure.logging.logger import logger
from .definitions import ToolCall, ToolResult


ToolFunc = Callable[[Dict[str, Any]], str]


class ToolExecutor:
    def __init__(self, tools: Dict[str, ToolFunc]):
        self._tools = dict(tools)

    def execute(self, call: ToolCall) -> ToolResult:
        func = self._tools.get(call.name)
        if not func:
            return ToolResult(call_id=call.id, name=call.name, content=f"Tool not registered: {call.name}")
        try:
            result = func(call.arguments)
        except Exception as e:
            logger.warning(
                "Tool execution failed",
                extra={"extra": {"tool_name": call.name, "tool_call_id": call.id, "error": str(e)}},
            )
            return ToolResult(call_id=call.id, name=call.name, content=f"Error: {e}")
        if not isinstance(result, str):
            result = str(result)
        return ToolResult(call_id=call.id, name=call.name, content=result)
