"""Job submission core for the aligner panel."""

from .config import PanelConfig
from .formats import FormatTag
from .guard import Acquisition, ExecutionGuard
from .jobs import JobDescription, MissingInputError, build_job
from .output import FixedPathChooser, OutputResolver, SaveRequest
from .params import Encoding, ParameterSlot, ParameterStore
from .properties import JsonPropertiesStore, MemoryStore
from .service import AlignerPanel, Outcome, SubmissionResult
from .submit import TaskSubmitter

__all__ = [
    "Acquisition",
    "AlignerPanel",
    "Encoding",
    "ExecutionGuard",
    "FixedPathChooser",
    "FormatTag",
    "JobDescription",
    "JsonPropertiesStore",
    "MemoryStore",
    "MissingInputError",
    "Outcome",
    "OutputResolver",
    "PanelConfig",
    "ParameterSlot",
    "ParameterStore",
    "SaveRequest",
    "SubmissionResult",
    "TaskSubmitter",
    "build_job",
]
