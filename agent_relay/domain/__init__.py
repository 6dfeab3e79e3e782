"""领域层模型与协议。

包含：
- models: 统一的 Turn / CompletionRequest / ProviderResponse / AgentConfig 模型。
- conversation: 单个 Agent 独占的会话历史 ConversationState。
- exceptions: 业务异常类型定义。
"""
