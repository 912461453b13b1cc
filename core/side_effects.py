"""
Post-commit side effects

After a mutation succeeds, persistence and change notification are handed to
the dispatcher. They are best-effort: a failing hook is logged and dropped.
The in-memory change stays, and the caller never sees the error.
"""
import logging
from concurrent.futures import Executor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PostCommitDispatcher:
    """
    執行 post-commit hooks

    executor=None 時在目前的 thread 內直接執行（測試用）；
    否則丟給 executor，不阻塞 request。
    """

    def __init__(self, executor: Optional[Executor] = None):
        self._executor = executor

    def dispatch(self, name: str, func: Callable, *args) -> None:
        if self._executor is None:
            self._run(name, func, *args)
            return
        try:
            self._executor.submit(self._run, name, func, *args)
        except RuntimeError as e:
            # executor 已關閉（shutdown 期間）
            logger.error(f"Post-commit hook {name} dropped: {e}")

    @staticmethod
    def _run(name: str, func: Callable, *args) -> None:
        try:
            func(*args)
        except Exception as e:
            logger.error(f"Post-commit hook {name} failed: {e}", exc_info=True)

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
