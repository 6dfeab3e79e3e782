"""会话历史模型。

ConversationState 只属于一个 Agent，历史只追加、不删除；
发请求时使用 snapshot()，保证在途请求不受后续追加影响。
"""

from typing import Iterable, Iterator, List, Tuple

from agent_relay.domain.exceptions import ValidationError
from agent_relay.domain.models import Turn


class ConversationState:
    """有序的对话历史，第一条始终是唯一的 system 消息。"""

    def __init__(self, turns: Iterable[Turn]):
        self._turns: List[Turn] = list(turns)
        if not self._turns or self._turns[0].role != "system":
            raise ValidationError(code="INVALID_HISTORY", message="history must start with a system turn")
        if any(t.role == "system" for t in self._turns[1:]):
            raise ValidationError(code="INVALID_HISTORY", message="history holds exactly one system turn")

    @classmethod
    def start(cls, system_prompt: str) -> "ConversationState":
        return cls([Turn(role="system", content=system_prompt)])

    def append(self, turn: Turn) -> None:
        if turn.role == "system":
            raise ValidationError(code="INVALID_HISTORY", message="system turn cannot be appended")
        self._turns.append(turn)

    def snapshot(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def first_turn(self) -> Turn:
        return self._turns[0]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())
