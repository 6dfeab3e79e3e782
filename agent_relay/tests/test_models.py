import pytest

from agent_relay.domain.conversation import ConversationState
from agent_relay.domain.exceptions import ValidationError
from agent_relay.domain.models import AgentConfig, CompletionRequest, Credentials, ProviderKind, Turn
from agent_relay.tools.definitions import ToolCall


def test_turn_name_only_on_tool_role():
    assert Turn(role="tool", content="42", name="eval_code").name == "eval_code"
    with pytest.raises(ValidationError):
        Turn(role="assistant", content="hi", name="eval_code")


def test_turn_rejects_unknown_role_and_non_text_content():
    with pytest.raises(ValidationError):
        Turn(role="robot", content="hi")
    with pytest.raises(ValidationError):
        Turn(role="user", content=None)


def test_turn_tool_calls_only_on_assistant():
    call = ToolCall(id="c1", name="read_file", arguments={"path": "a.txt"})
    turn = Turn(role="assistant", content="", tool_calls=[call])
    assert turn.tool_calls == (call,)
    with pytest.raises(ValidationError):
        Turn(role="user", content="x", tool_calls=[call])


def test_conversation_starts_with_single_system_turn():
    conv = ConversationState.start("sys")
    assert len(conv) == 1
    assert conv.first_turn() == Turn(role="system", content="sys")
    with pytest.raises(ValidationError):
        ConversationState([Turn(role="user", content="hi")])
    with pytest.raises(ValidationError):
        conv.append(Turn(role="system", content="again"))


def test_snapshot_is_unaffected_by_later_appends():
    conv = ConversationState.start("sys")
    conv.append(Turn(role="user", content="one"))
    snap = conv.snapshot()
    conv.append(Turn(role="assistant", content="two"))
    assert len(snap) == 2
    assert len(conv) == 3
    assert [t.content for t in conv] == ["sys", "one", "two"]


def test_completion_request_validation():
    history = (Turn(role="system", content="sys"),)
    with pytest.raises(ValidationError):
        CompletionRequest(model="m", history=history, max_tokens=0)
    with pytest.raises(ValidationError):
        CompletionRequest(model="m", history=history, temperature=2.5)
    with pytest.raises(ValidationError):
        CompletionRequest(model="m", history=history, tool_choice="forced")
    req = CompletionRequest(model="m", history=history, tool_choice="forced", forced_tool="read_file")
    assert req.forced_tool == "read_file"


def test_agent_config_is_frozen_and_validated():
    cfg = AgentConfig(provider_kind=ProviderKind.OPENAI, model_name="gpt-4o-mini")
    with pytest.raises(AttributeError):
        cfg.max_tokens = 10
    with pytest.raises(ValidationError):
        AgentConfig(provider_kind=ProviderKind.OPENAI, model_name="m", retry_count=0)
    with pytest.raises(ValidationError):
        AgentConfig(provider_kind=ProviderKind.OPENAI, model_name="m", batch_max_workers=0)


def test_credentials_repr_hides_key():
    assert "sk-secret" not in repr(Credentials(api_key="sk-secret"))


def test_provider_kind_parse():
    assert ProviderKind.parse("OpenAI") is ProviderKind.OPENAI
    assert ProviderKind.parse("claude") is ProviderKind.ANTHROPIC
    assert ProviderKind.parse("ollama") is ProviderKind.OLLAMA
    assert ProviderKind.parse("gemini") is ProviderKind.GOOGLE
    assert ProviderKind.parse("mystery") is ProviderKind.OPENAI
    assert ProviderKind.parse(None) is ProviderKind.OPENAI
