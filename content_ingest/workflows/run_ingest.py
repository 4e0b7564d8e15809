from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from content_ingest.config.settings import Settings
from content_ingest.db.repository import ArticleRepository
from content_ingest.errors import BranchFailure
from content_ingest.services.notify import Notifier
from content_ingest.services.scheduler import PublishScheduler
from content_ingest.workflows.branches import Branch, IngestContext, build_branches


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ALL_SUCCEEDED = "all_succeeded"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"


@dataclass
class BranchOutcome:
    """Ok(payload) when ``error`` is None, Err(error) otherwise."""

    name: str
    payload: dict | None = None
    error: BranchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        if self.ok:
            return f"{self.name}: ok {json.dumps(self.payload, ensure_ascii=False)}"
        return f"{self.name}: failed {self.error.cause}"


@dataclass
class RunResult:
    state: RunState
    outcomes: list[BranchOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0
    notified: bool = False

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def exit_code(self) -> int:
        return 1 if self.state == RunState.TOTAL_FAILURE else 0

    def failed(self) -> list[BranchOutcome]:
        return [o for o in self.outcomes if not o.ok]


class IngestOrchestrator:
    """
    Runs every branch on its own worker and waits for all of them.

    A branch that raises becomes an Err outcome; it never cancels or
    short-circuits its siblings.
    """

    def __init__(
        self,
        branches: Sequence[Branch],
        notifier: Notifier,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.branches = list(branches)
        self.notifier = notifier
        self.log = logger or logging.getLogger(__name__)
        self.clock = clock
        self.state = RunState.IDLE

    def _settle(self) -> list[BranchOutcome]:
        outcomes: list[BranchOutcome] = []
        with ThreadPoolExecutor(max_workers=max(len(self.branches), 1), thread_name_prefix="branch") as pool:
            futures = [(b.name, pool.submit(b.run)) for b in self.branches]
            for name, future in futures:
                try:
                    outcomes.append(BranchOutcome(name, payload=future.result()))
                except Exception as exc:
                    outcomes.append(BranchOutcome(name, error=BranchFailure(name, exc)))
        return outcomes

    def run(self) -> RunResult:
        started = self.clock()
        self.state = RunState.RUNNING
        self.log.info("Ingest started (%s branches)", len(self.branches))

        outcomes = self._settle()
        for o in outcomes:
            if o.ok:
                self.log.info("%s completed: %s", o.name, json.dumps(o.payload, ensure_ascii=False))
            else:
                self.log.error("%s failed: %s", o.name, o.error.cause)

        result = RunResult(state=RunState.RUNNING, outcomes=outcomes)
        result.duration_seconds = self.clock() - started
        total = len(outcomes)
        ok = result.success_count

        if ok == 0:
            result.state = RunState.TOTAL_FAILURE
            self.log.error("Ingest finished: no successful fetchers")
            result.notified = self.notifier.send(
                self._report("Ingest finished: no successful fetchers", result)
            )
        elif ok < total:
            result.state = RunState.PARTIAL_FAILURE
            result.notified = self.notifier.send(
                self._report("Ingest finished with partial failures", result)
            )
            self.log.warning("Ingest finished: partial success (%s/%s)", ok, total)
        else:
            result.state = RunState.ALL_SUCCEEDED
            self.log.info("Ingest finished: success")

        self.state = result.state
        return result

    @staticmethod
    def _report(headline: str, result: RunResult) -> str:
        summary = (
            f"Duration: {round(result.duration_seconds)}s | "
            f"Success: {result.success_count}/{len(result.outcomes)}"
        )
        return "\n".join([headline, summary, *(o.describe() for o in result.outcomes)])


def run_ingest(
    settings: Settings,
    repo: ArticleRepository,
    notifier: Notifier,
    logger: logging.Logger | None = None,
    scheduler: PublishScheduler | None = None,
) -> RunResult:
    ctx = IngestContext(
        settings=settings,
        repo=repo,
        scheduler=scheduler or PublishScheduler.from_settings(settings),
        logger=logger or logging.getLogger("content_ingest.run"),
    )
    return IngestOrchestrator(build_branches(ctx), notifier, logger=ctx.logger).run()
