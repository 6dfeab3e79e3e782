"""工具数据结构定义。

这些 dataclass 描述了“工具调用”的 schema，既用于：
- 将可用工具列表暴露给 LLM（ToolDescriptor）。
- 在 Agent 中保存模型触发的工具调用并回填结果（ToolCall / ToolResult）。
"""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class ToolDescriptor:
    """一个可供 LLM 调用的工具定义。

    parameters 是 JSON schema 形式的参数描述，原样交给 Provider。
    """

    name: str
    description: str
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCall:
    """模型发起的一次工具调用请求。"""

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    """工具执行结果的封装（文本形式）。"""

    call_id: str
    name: str
    content: str
