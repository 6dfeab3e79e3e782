"""静态工具目录。

ToolCatalog 在进程启动时构造，之后只读，可在多个 Agent / 线程之间共享。
每次请求都会通过 describe_all() 把完整工具列表发给 Provider。
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from agent_relay.domain.exceptions import ValidationError
from .definitions import ToolDescriptor


class ToolCatalog:
    def __init__(self, descriptors: Iterable[ToolDescriptor] = ()):
        tools = {}
        for desc in descriptors:
            if desc.name in tools:
                raise ValidationError(code="DUPLICATE_TOOL", message=f"tool already registered: {desc.name}")
            tools[desc.name] = desc
        self._tools: Mapping[str, ToolDescriptor] = MappingProxyType(tools)

    def describe_all(self) -> Tuple[ToolDescriptor, ...]:
        return tuple(self._tools.values())

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def _object_schema(**properties: str) -> dict:
    return {
        "type": "object",
        "properties": {name: {"type": "string", "description": desc} for name, desc in properties.items()},
        "required": list(properties),
    }


def default_catalog() -> ToolCatalog:
    """内置的七个工具定义（具体实现由外部工具层提供）。"""

    return ToolCatalog(
        [
            ToolDescriptor(
                name="read_file",
                description="Read a file from the filesystem",
                parameters=_object_schema(path="Path of the file to read"),
            ),
            ToolDescriptor(
                name="write_file",
                description="Write content to a file",
                parameters=_object_schema(path="Path of the file to write", content="Full file content"),
            ),
            ToolDescriptor(
                name="delete_file",
                description="Delete a file from the filesystem",
                parameters=_object_schema(path="Path of the file to delete"),
            ),
            ToolDescriptor(
                name="list_dir",
                description="List files in a directory",
                parameters=_object_schema(path="Directory to list"),
            ),
            ToolDescriptor(
                name="run_command",
                description="Run a shell command",
                parameters=_object_schema(command="Command line to execute"),
            ),
            ToolDescriptor(
                name="fetch_url",
                description="Perform a GET request to a URL",
                parameters=_object_schema(url="Absolute http(s) URL"),
            ),
            ToolDescriptor(
                name="eval_code",
                description="Evaluate a Python code snippet and return its output",
                parameters=_object_schema(code="Source code to evaluate"),
            ),
        ]
    )
