"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置，
并在启动时一次性解析成不可变的 AgentConfig。
核心逻辑（Agent / Provider / Batch）不直接读取本模块或环境变量。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_relay.domain.exceptions import ConfigurationError
from agent_relay.domain.models import AgentConfig, Credentials, ProviderKind
from agent_relay.infrastructure.logging.logger import logger
from agent_relay.prompts import load_system_prompt
from agent_relay.providers.registry import get_provider_config


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("AGENT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """进程级配置（使用 Pydantic）。"""

    # ---- Provider 相关配置 ----
    api_provider: str = Field(
        default="openai",
        description="Provider 名称：openai、anthropic(claude)、ollama、google；未知值回退到 openai",
    )
    model_name: Optional[str] = Field(
        default=None,
        description="模型名，为空时使用 registry 中该 Provider 的默认模型",
    )
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API 密钥")
    google_api_key: Optional[str] = Field(default=None, description="Google API 密钥（以 query 参数发送）")

    # ---- 生成参数 ----
    max_tokens: int = Field(default=1024, ge=1, description="单次回复最大 token 数")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="生成温度")

    # ---- 重试与超时 ----
    retry_count: int = Field(default=3, ge=1, description="传输层最大尝试次数")
    backoff_base_ms: int = Field(default=500, ge=0, description="指数退避基数（毫秒）")
    http_timeout: float = Field(default=30.0, ge=1.0, description="单次 HTTP 超时时间（秒）")

    # ---- 批处理 ----
    batch_max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="批处理最大并发数，为空时每个 prompt 一个线程",
    )

    system_prompt: Optional[str] = Field(default=None, description="覆盖内置的 system prompt")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openai_api_key", "anthropic_api_key", "google_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


_CREDENTIAL_FIELDS = {
    ProviderKind.OPENAI: ("openai_api_key", "OPENAI_API_KEY"),
    ProviderKind.ANTHROPIC: ("anthropic_api_key", "ANTHROPIC_API_KEY"),
    ProviderKind.GOOGLE: ("google_api_key", "GOOGLE_API_KEY"),
}


def load_agent_config(settings: Optional[Settings] = None) -> AgentConfig:
    """把配置解析成不可变的 AgentConfig。

    - 未知的 api_provider 回退到 openai（记录 warning，不报错）。
    - 本地 ollama 始终使用 registry 中的固定模型，且不需要凭据。
    - 所选 Provider 缺少 API key 时抛出 ConfigurationError。
    """

    settings = settings or Settings()
    kind = ProviderKind.parse(settings.api_provider)
    if kind is ProviderKind.OPENAI and settings.api_provider.strip().lower() != "openai":
        logger.warning(
            "Unknown provider, falling back to openai",
            extra={"extra": {"api_provider": settings.api_provider}},
        )

    provider_cfg = get_provider_config(kind)
    if provider_cfg.fixed_model:
        model = provider_cfg.default_model
    else:
        model = settings.model_name or provider_cfg.default_model

    api_key = None
    if kind in _CREDENTIAL_FIELDS:
        field_name, env_name = _CREDENTIAL_FIELDS[kind]
        api_key = getattr(settings, field_name, None)
        if not api_key:
            raise ConfigurationError(code="MISSING_API_KEY", message=f"{env_name} not set", provider=kind.value)

    return AgentConfig(
        provider_kind=kind,
        model_name=model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        retry_count=settings.retry_count,
        backoff_base_ms=settings.backoff_base_ms,
        credentials=Credentials(api_key=api_key),
        http_timeout=settings.http_timeout,
        system_prompt=settings.system_prompt or load_system_prompt(),
        batch_max_workers=settings.batch_max_workers,
    )
