"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取 system prompt 文本，
用于构造会话的第一条 Turn(role="system")。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "en") -> str:
    """加载内置的 system prompt 文本（去掉首尾空白）。"""

    fname = PROMPTS_DIR / locale / "agent_system.md"
    return fname.read_text(encoding="utf-8").strip()
