"""本地 Ollama daemon 适配器。

与 OpenAI 共享 chat/completions 的 JSON 结构，区别只有：
固定的本地端点、固定的模型名、不发送认证头。
"""

from typing import Dict

from agent_relay.domain.models import CompletionRequest, ProviderKind
from agent_relay.providers.openai_client import OpenAIAdapter


class OllamaAdapter(OpenAIAdapter):
    kind = ProviderKind.OLLAMA

    def _model(self, req: CompletionRequest) -> str:
        return self._provider_cfg.default_model

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}
