"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 适配器基类与 WireRequest (base)。
- 维护各 Provider 的端点与默认模型 (registry)。
- 提供四种具体实现 (openai_client、anthropic_client、ollama_client、google_client)。
- 带退避重试的 HTTP 传输层 (transport)。

新增 Provider 时只需实现一个 ProviderAdapter 子类并登记到 ADAPTERS。
"""

from typing import Dict, Type

from agent_relay.domain.models import AgentConfig, ProviderKind
from agent_relay.providers.anthropic_client import AnthropicAdapter
from agent_relay.providers.base import ProviderAdapter, WireRequest
from agent_relay.providers.google_client import GoogleAdapter
from agent_relay.providers.ollama_client import OllamaAdapter
from agent_relay.providers.openai_client import OpenAIAdapter
from agent_relay.providers.transport import RetryingTransport


ADAPTERS: Dict[ProviderKind, Type[ProviderAdapter]] = {
    ProviderKind.OPENAI: OpenAIAdapter,
    ProviderKind.ANTHROPIC: AnthropicAdapter,
    ProviderKind.OLLAMA: OllamaAdapter,
    ProviderKind.GOOGLE: GoogleAdapter,
}


def create_adapter(config: AgentConfig) -> ProviderAdapter:
    """根据 config.provider_kind 创建适配器，未登记的类型回退到 OpenAI。"""

    adapter_cls = ADAPTERS.get(config.provider_kind, OpenAIAdapter)
    return adapter_cls(config)


__all__ = [
    "ADAPTERS",
    "ProviderAdapter",
    "RetryingTransport",
    "WireRequest",
    "create_adapter",
]
