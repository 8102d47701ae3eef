"""Default job runner: drives bwa, samtools and GATK for one job description.

The tools do the alignment and the recalibration; this module only lays out
the command lines, runs them in a per-job working directory and logs the
outcome. Failures stay inside the worker thread.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .config import PanelConfig
from .jobs import JobDescription
from .output import strip_extensions
from .params import Encoding

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("bwa", "samtools", "gatk")


@dataclass(frozen=True)
class PipelineStep:
    name: str
    args: Tuple[str, ...]


def read_group(sample: str) -> str:
    # bwa expands the literal "\t" sequences itself.
    return f"@RG\\tID:{sample}\\tSM:{sample}\\tPL:ILLUMINA"


def build_steps(job: JobDescription, *, work_dir: Path, threads: int, tools: Dict[str, str]) -> List[PipelineStep]:
    sample = strip_extensions(job.forward_reads.name) or "sample"
    sam = work_dir / "aligned.sam"
    sorted_bam = work_dir / "sorted.bam"
    recal_table = work_dir / "recal.table"
    bwa, samtools, gatk = tools["bwa"], tools["samtools"], tools["gatk"]

    steps = [
        PipelineStep(
            "align",
            (bwa, "mem", "-t", str(threads), "-R", read_group(sample), "-o", str(sam),
             str(job.reference_genome), str(job.forward_reads), str(job.reverse_reads)),
        ),
        PipelineStep("sort", (samtools, "sort", "-@", str(threads), "-o", str(sorted_bam), str(sam))),
        PipelineStep("index", (samtools, "index", str(sorted_bam))),
    ]

    recal_input = sorted_bam
    if job.encoding is Encoding.PHRED64:
        recal_input = work_dir / "phred33.bam"
        steps.append(
            PipelineStep(
                "fix_encoding",
                (gatk, "FixMisencodedBaseQualityReads", "-I", str(sorted_bam), "-O", str(recal_input)),
            )
        )

    known_sites: List[str] = []
    for path in job.known_sites:
        known_sites.extend(["--known-sites", str(path)])
    steps.append(
        PipelineStep(
            "recalibrate",
            (gatk, "BaseRecalibrator", "-R", str(job.reference_genome), "-I", str(recal_input),
             *known_sites, "-O", str(recal_table)),
        )
    )
    steps.append(
        PipelineStep(
            "apply_recalibration",
            (gatk, "ApplyBQSR", "-R", str(job.reference_genome), "-I", str(recal_input),
             "--bqsr-recal-file", str(recal_table), "-O", str(job.output_path)),
        )
    )
    return steps


def _require_command(name: str) -> str:
    path = shutil.which(name)
    if not path:
        raise RuntimeError(f"Required command '{name}' is not installed or not on PATH")
    return path


def _run_command(args: Sequence[str], *, cwd: Path, timeout_seconds: int) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        list(args),
        cwd=str(cwd),
        check=True,
        capture_output=True,
        text=True,
        timeout=timeout_seconds,
    )


class AlignmentRunner:
    def __init__(self, config: PanelConfig) -> None:
        self.config = config

    def __call__(self, job: JobDescription) -> None:
        try:
            self.run(job)
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            text = stderr[-1500:] if stderr else str(exc)
            logger.error("Alignment command failed for %s: %s", job.output_path, text)
        except subprocess.TimeoutExpired:
            logger.error(
                "Alignment command for %s exceeded %d seconds",
                job.output_path,
                self.config.command_timeout_seconds,
            )
        except Exception as exc:
            logger.exception("Alignment job for %s failed: %s", job.output_path, exc)

    def run(self, job: JobDescription) -> Path:
        tools = {name: _require_command(name) for name in REQUIRED_TOOLS}
        work_dir = self.config.work_root / uuid.uuid4().hex
        work_dir.mkdir(parents=True, exist_ok=True)
        job.output_path.parent.mkdir(parents=True, exist_ok=True)

        steps = build_steps(job, work_dir=work_dir, threads=self.config.threads, tools=tools)
        try:
            for index, step in enumerate(steps, start=1):
                logger.info("[%s] step %d/%d: %s", job.output_path.name, index, len(steps), step.name)
                _run_command(step.args, cwd=work_dir, timeout_seconds=self.config.command_timeout_seconds)
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
        logger.info("Alignment complete: %s", job.output_path)
        return job.output_path
