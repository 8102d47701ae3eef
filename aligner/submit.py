from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor
from typing import Callable, Optional

from .jobs import JobDescription

logger = logging.getLogger(__name__)

JobRunner = Callable[[JobDescription], None]


class TaskSubmitter:
    """Fire-and-forget hand-off of jobs to a runner.

    With an ``executor`` the runner is scheduled on it and the returned future
    is dropped; otherwise every job gets its own daemon thread.
    """

    def __init__(self, runner: JobRunner, executor: Optional[Executor] = None) -> None:
        self.runner = runner
        self.executor = executor

    def submit(self, job: JobDescription) -> None:
        logger.info("Submitting alignment job -> %s", job.output_path)
        if self.executor is not None:
            self.executor.submit(self.runner, job)
            return
        worker = threading.Thread(
            target=self.runner,
            args=(job,),
            name=f"aligner-{job.output_path.name}",
            daemon=True,
        )
        worker.start()
