from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import PanelConfig
from .guard import Acquisition, ExecutionGuard
from .jobs import JobDescription, MissingInputError, build_job, missing_inputs
from .output import Chooser, OutputResolver
from .params import Encoding, ParameterStore
from .pipeline import AlignmentRunner
from .properties import JsonPropertiesStore
from .submit import JobRunner, TaskSubmitter

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SUBMITTED = "submitted"
    DENIED = "denied"
    CANCELLED = "cancelled"
    MISSING_INPUT = "missing_input"


@dataclass
class SubmissionResult:
    outcome: Outcome
    job: Optional[JobDescription] = None
    missing: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "outcome": self.outcome.value,
            "output_path": str(self.job.output_path) if self.job is not None else None,
            "missing": list(self.missing),
        }


class AlignerPanel:
    """Submission path of the aligner panel.

    Built once by the hosting application and handed to whatever triggers
    ``start``. Denied, cancelled and incomplete attempts are reported through
    the returned ``SubmissionResult``. Any exception raised on the way, such
    as an output path without a file name, releases the guard before it
    propagates.
    """

    def __init__(
        self,
        params: ParameterStore,
        guard: ExecutionGuard,
        submitter: TaskSubmitter,
        cooldown_seconds: Optional[float] = None,
    ) -> None:
        self.params = params
        self.guard = guard
        self.submitter = submitter
        self.cooldown_seconds = guard.cooldown_seconds if cooldown_seconds is None else cooldown_seconds

    @classmethod
    def from_config(
        cls,
        config: PanelConfig,
        *,
        store: Optional[Any] = None,
        runner: Optional[JobRunner] = None,
    ) -> "AlignerPanel":
        properties = store if store is not None else JsonPropertiesStore(config.properties_path)
        return cls(
            params=ParameterStore.create(properties),
            guard=ExecutionGuard(config.cooldown_seconds),
            submitter=TaskSubmitter(runner or AlignmentRunner(config)),
        )

    def start(self, chooser: Chooser) -> SubmissionResult:
        if self.guard.try_acquire() is Acquisition.DENIED:
            return SubmissionResult(Outcome.DENIED)

        try:
            result = self._submit(chooser)
        except Exception:
            self.guard.release(0)
            raise
        self.guard.release(self.cooldown_seconds if result.outcome is Outcome.SUBMITTED else 0)
        return result

    def _submit(self, chooser: Chooser) -> SubmissionResult:
        snapshot = self.params.snapshot()
        missing = missing_inputs(snapshot)
        if missing:
            logger.info("Not submitting; missing inputs: %s", ", ".join(missing))
            return SubmissionResult(Outcome.MISSING_INPUT, missing=missing)

        output_path = OutputResolver(chooser).resolve_for_source(snapshot.forward_reads)
        if output_path is None:
            return SubmissionResult(Outcome.CANCELLED)

        try:
            job = build_job(snapshot, snapshot.encoding, output_path)
        except MissingInputError as exc:
            return SubmissionResult(Outcome.MISSING_INPUT, missing=[exc.slot])

        self.submitter.submit(job)
        return SubmissionResult(Outcome.SUBMITTED, job=job)

    def describe(self) -> Dict[str, object]:
        encoding = self.params.encoding
        return {
            "parameters": self.params.describe(),
            "encoding": encoding.value if encoding is not None else None,
            "encodings": [{"value": item.value, "label": item.label} for item in Encoding],
            "busy": self.guard.busy,
        }

    def shutdown(self) -> None:
        self.guard.shutdown()
