from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .params import DBSNP, FORWARD, GENOME, KNOWN_SITES_ROLES, MILLS, PHASE1, REVERSE, Encoding, ParameterSnapshot

ENCODING = "encoding"
OUTPUT = "output"

MISSING_INPUT = "MissingInput"


class MissingInputError(ValueError):
    kind = MISSING_INPUT

    def __init__(self, slot: str) -> None:
        super().__init__(f"Required input '{slot}' is not set")
        self.slot = slot


@dataclass(frozen=True)
class JobDescription:
    forward_reads: Path
    reverse_reads: Path
    reference_genome: Path
    known_sites: Tuple[Path, ...]
    encoding: Encoding
    output_path: Path

    def to_dict(self) -> Dict[str, object]:
        return {
            "forward_reads": str(self.forward_reads),
            "reverse_reads": str(self.reverse_reads),
            "reference_genome": str(self.reference_genome),
            "known_sites": [str(path) for path in self.known_sites],
            "encoding": self.encoding.value,
            "output_path": str(self.output_path),
        }


def _required_values(snapshot: ParameterSnapshot) -> List[Tuple[str, object]]:
    return [
        (FORWARD, snapshot.forward_reads),
        (REVERSE, snapshot.reverse_reads),
        (GENOME, snapshot.reference_genome),
        (DBSNP, snapshot.dbsnp),
        (MILLS, snapshot.mills),
        (PHASE1, snapshot.phase1),
        (ENCODING, snapshot.encoding),
    ]


def missing_inputs(snapshot: ParameterSnapshot, output_path: Optional[Path] = None, *, include_output: bool = False) -> List[str]:
    missing = [name for name, value in _required_values(snapshot) if value is None]
    if include_output and output_path is None:
        missing.append(OUTPUT)
    return missing


def build_job(snapshot: ParameterSnapshot, encoding: Optional[Encoding], output_path: Optional[Path]) -> JobDescription:
    """Assemble a job from a parameter snapshot; ``encoding`` overrides the snapshot's own."""
    if encoding is not None:
        snapshot = replace(snapshot, encoding=encoding)
    missing = missing_inputs(snapshot, output_path, include_output=True)
    if missing:
        raise MissingInputError(missing[0])

    return JobDescription(
        forward_reads=snapshot.forward_reads,
        reverse_reads=snapshot.reverse_reads,
        reference_genome=snapshot.reference_genome,
        known_sites=tuple(getattr(snapshot, role) for role in KNOWN_SITES_ROLES),
        encoding=snapshot.encoding,
        output_path=output_path,
    )
