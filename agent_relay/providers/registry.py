"""Provider 端点与模型配置。

每种 ProviderKind 在这里集中登记 base_url、请求路径与默认模型，
适配器只从这里取 URL，便于后续升级 API 版本或替换默认模型。"""

from dataclasses import dataclass
from typing import Mapping

from agent_relay.domain.models import ProviderKind


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的端点配置。"""

    kind: ProviderKind
    base_url: str
    path: str
    default_model: str
    # True 时忽略 MODEL_NAME，始终使用 default_model（本地 daemon）
    fixed_model: bool = False

    def endpoint(self, model: str) -> str:
        return self.base_url + self.path.format(model=model)


OPENAI_CONFIG = ProviderConfig(
    kind=ProviderKind.OPENAI,
    base_url="https://api.openai.com/v1",
    path="/chat/completions",
    default_model="gpt-4o-mini",
)

ANTHROPIC_CONFIG = ProviderConfig(
    kind=ProviderKind.ANTHROPIC,
    base_url="https://api.anthropic.com/v1",
    path="/complete",
    default_model="claude-2",
)

OLLAMA_CONFIG = ProviderConfig(
    kind=ProviderKind.OLLAMA,
    base_url="http://localhost:11434/v1",
    path="/chat/completions",
    default_model="agent-relay",
    fixed_model=True,
)

GOOGLE_CONFIG = ProviderConfig(
    kind=ProviderKind.GOOGLE,
    base_url="https://generativelanguage.googleapis.com/v1beta2",
    path="/models/{model}:generateMessage",
    default_model="chat-bison-001",
)


PROVIDER_REGISTRY: Mapping[ProviderKind, ProviderConfig] = {
    ProviderKind.OPENAI: OPENAI_CONFIG,
    ProviderKind.ANTHROPIC: ANTHROPIC_CONFIG,
    ProviderKind.OLLAMA: OLLAMA_CONFIG,
    ProviderKind.GOOGLE: GOOGLE_CONFIG,
}


def get_provider_config(kind: ProviderKind) -> ProviderConfig:
    return PROVIDER_REGISTRY[kind]
