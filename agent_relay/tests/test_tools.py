import pytest

from agent_relay.domain.exceptions import ValidationError
from agent_relay.tools.catalog import ToolCatalog, default_catalog
from agent_relay.tools.definitions import ToolCall, ToolDescriptor
from agent_relay.tools.executor import ToolExecutor


def test_default_catalog_lists_builtin_tools():
    catalog = default_catalog()
    assert catalog.names() == (
        "read_file",
        "write_file",
        "delete_file",
        "list_dir",
        "run_command",
        "fetch_url",
        "eval_code",
    )
    write = catalog.get("write_file")
    assert write.parameters["required"] == ["path", "content"]
    assert "missing" not in catalog


def test_catalog_rejects_duplicate_names():
    desc = ToolDescriptor(name="read_file", description="read")
    with pytest.raises(ValidationError):
        ToolCatalog([desc, desc])


def test_executor_runs_registered_tool():
    te = ToolExecutor({"echo": lambda args: args["text"].upper()})
    res = te.execute(ToolCall(id="1", name="echo", arguments={"text": "hi"}))
    assert res.content == "HI"
    assert res.name == "echo"
    assert res.call_id == "1"


def test_executor_turns_failures_into_text():
    def boom(args):
        raise OSError("disk full")

    te = ToolExecutor({"write_file": boom})
    res = te.execute(ToolCall(id="1", name="write_file", arguments={}))
    assert res.content == "Error: disk full"
    missing = te.execute(ToolCall(id="2", name="fetch_url", arguments={}))
    assert missing.content == "Tool not registered: fetch_url"
