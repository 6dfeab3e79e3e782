"""批量并发执行多个互不相关的单轮对话。

每个 prompt 都会新建一个独立的 Agent（system 消息 + 该 prompt），
各 Agent 之间只共享不可变的 AgentConfig 与 ToolCatalog，
因此不需要任何锁。单个任务失败只记录日志，不影响其他任务。
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from agent_relay.domain.models import AgentConfig, Turn
from agent_relay.infrastructure.logging.logger import logger
from agent_relay.tools.catalog import ToolCatalog, default_catalog
from .agent import Agent


AgentFactory = Callable[[AgentConfig, str], Agent]


@dataclass
class BatchOutcome:
    """单个 prompt 的执行结果；reply 与 error 二者恰有其一。"""

    index: int
    prompt: str
    reply: Optional[Turn] = None
    error: Optional[Exception] = None
    agent: Optional[Agent] = None

    @property
    def ok(self) -> bool:
        return self.reply is not None


class BatchDispatcher:
    def __init__(
        self,
        config: AgentConfig,
        catalog: Optional[ToolCatalog] = None,
        agent_factory: Optional[AgentFactory] = None,
        max_workers: Optional[int] = None,
        system_turn: Optional[Turn] = None,
    ):
        self._config = config
        self._catalog = catalog if catalog is not None else default_catalog()
        self._system_turn = system_turn or Turn(role="system", content=config.system_prompt)
        self._agent_factory = agent_factory or self._new_agent
        # 为空时每个 prompt 一个线程
        self._max_workers = max_workers or config.batch_max_workers

    def run_batch(self, prompts: Iterable[str]) -> List[Turn]:
        """并发执行所有 prompt，按输入顺序返回成功的回复，失败的 prompt 不占位。"""

        return [outcome.reply for outcome in self.collect(prompts) if outcome.reply is not None]

    def collect(self, prompts: Iterable[str]) -> List[BatchOutcome]:
        """并发执行所有 prompt，返回与输入一一对应的 BatchOutcome 列表。"""

        outcomes = [BatchOutcome(index=i, prompt=p) for i, p in enumerate(prompts)]
        if not outcomes:
            return []
        workers = min(self._max_workers or len(outcomes), len(outcomes))
        logger.info(
            "Starting batch",
            extra={"extra": {"prompt_count": len(outcomes), "workers": workers}},
        )
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="agent-batch") as pool:
            futures = [pool.submit(self._run_one, outcome) for outcome in outcomes]
            for future in futures:
                future.result()
        logger.info(
            "Finished batch",
            extra={
                "extra": {
                    "prompt_count": len(outcomes),
                    "succeeded": sum(1 for o in outcomes if o.ok),
                }
            },
        )
        return outcomes

    def _run_one(self, outcome: BatchOutcome) -> BatchOutcome:
        try:
            outcome.agent = self._agent_factory(self._config, outcome.prompt)
            outcome.reply = outcome.agent.send_request(None)
        except Exception as e:
            outcome.error = e
            logger.warning(
                "Batch task failed",
                extra={
                    "extra": {
                        "index": outcome.index,
                        "error_code": getattr(e, "code", type(e).__name__),
                        "error": str(e),
                    }
                },
            )
        return outcome

    def _new_agent(self, config: AgentConfig, prompt: str) -> Agent:
        return Agent.for_prompt(config, prompt, catalog=self._catalog, system_turn=self._system_turn)
