"""Agent Relay 顶层包。

该包在调用方（用户输入 / 工具调用循环）与多个 LLM 后端之间做统一调度：
配置加载、领域模型、四种 Provider 适配、带退避的传输重试、
单会话 Agent 以及多会话并发批处理。
"""

from agent_relay.agents.agent import Agent, AgentState
from agent_relay.agents.batch import BatchDispatcher, BatchOutcome
from agent_relay.domain.models import AgentConfig, ProviderKind, Turn

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentState",
    "BatchDispatcher",
    "BatchOutcome",
    "ProviderKind",
    "Turn",
]
