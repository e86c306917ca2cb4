"""Run one query kind against many repositories in parallel.

Work is spread over a bounded thread pool; each repository is one unit of
work. A unit never raises: whatever goes wrong inside it becomes an
``Err(QueryFailure)`` for that repository alone. Results are gathered in
the calling thread only, so workers share no mutable state.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Protocol

from gg.core.repo import RepoIdentity, unique_sorted
from gg.core.result import Err, Ok, Result
from gg.git.inspector import FailureReason, QueryFailure, QueryKind, QueryValue, inspect

__all__ = ["Inspector", "QueryExecutor", "QueryOutcome", "default_parallelism"]

logger = logging.getLogger(__name__)

type QueryOutcome = Result[QueryValue, QueryFailure]


class Inspector(Protocol):
    def __call__(
        self, path: Path, kind: QueryKind, *, include_untracked: bool = True
    ) -> QueryOutcome: ...


def default_parallelism() -> int:
    """Number of worker threads to use when none is configured."""
    return os.cpu_count() or 4


class QueryExecutor:
    """Fan a query out over repositories and collect one outcome per repository.

    Attributes:
        max_workers: Upper bound on concurrent inspector calls
        inspector: Callable answering one query for one path
    """

    def __init__(self, *, max_workers: int | None = None, inspector: Inspector = inspect) -> None:
        self.max_workers = max_workers or default_parallelism()
        self.inspector = inspector

    def run(
        self,
        repos: Iterable[RepoIdentity],
        kind: QueryKind,
        *,
        include_untracked: bool = True,
    ) -> dict[RepoIdentity, QueryOutcome]:
        """Query every repository and return outcomes keyed by identity.

        The mapping has exactly one entry per distinct input repository.
        If the wait is interrupted (e.g. Ctrl-C), queued units are cancelled,
        running ones are abandoned and the exception propagates; no partial
        mapping is returned.
        """
        targets = unique_sorted(repos)
        if not targets:
            return {}
        if kind.lists_everything:
            return {repo: Ok(()) for repo in targets}

        workers = max(1, min(len(targets), self.max_workers))
        logger.debug("Running %s on %d repos with %d workers", kind, len(targets), workers)

        outcomes: dict[RepoIdentity, QueryOutcome] = {}
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="git-global")
        try:
            futures: dict[Future[QueryOutcome], RepoIdentity] = {
                pool.submit(self._run_one, repo, kind, include_untracked): repo
                for repo in targets
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()
        except BaseException:
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown(wait=True)
        return outcomes

    def _run_one(
        self, repo: RepoIdentity, kind: QueryKind, include_untracked: bool
    ) -> QueryOutcome:
        try:
            outcome = self.inspector(repo.path, kind, include_untracked=include_untracked)
        except Exception as e:  # noqa: BLE001
            logger.debug("%s query crashed for %s", kind, repo, exc_info=True)
            return Err(QueryFailure(FailureReason.OPERATION_FAILED, f"{type(e).__name__}: {e}"))

        if isinstance(outcome, Err):
            logger.debug("%s query failed for %s: %s", kind, repo, outcome.error.message)
        return outcome
