from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .formats import FormatTag, matches_any

logger = logging.getLogger(__name__)

Pathish = Union[str, Path]
SlotListener = Callable[["ParameterSlot", Optional[Path], Optional[Path]], None]

FORWARD = "forward"
REVERSE = "reverse"
GENOME = "genome"
DBSNP = "dbsnp"
MILLS = "mills"
PHASE1 = "phase1"

KNOWN_SITES_ROLES: Tuple[str, ...] = (DBSNP, MILLS, PHASE1)


class Encoding(str, Enum):
    PHRED33 = "phred33"
    PHRED64 = "phred64"

    @property
    def label(self) -> str:
        return "PHRED+33" if self is Encoding.PHRED33 else "PHRED+64"


@dataclass(frozen=True)
class SlotSpec:
    role: str
    label: str
    formats: Tuple[FormatTag, ...]
    persisted_key: Optional[str] = None


SLOT_SPECS: Tuple[SlotSpec, ...] = (
    SlotSpec(FORWARD, "Forward sequences", (FormatTag.FASTQ,)),
    SlotSpec(REVERSE, "Reverse sequences", (FormatTag.FASTQ,)),
    SlotSpec(GENOME, "Genome (GRCh37)", (FormatTag.FASTA,), "reference.genome"),
    SlotSpec(DBSNP, "dbSNP", (FormatTag.VCF,), "dbSNP"),
    SlotSpec(MILLS, "Mills", (FormatTag.VCF,), "mills"),
    SlotSpec(PHASE1, "1000 genomes phase 1 indels", (FormatTag.VCF,), "phase1"),
)


def parse_encoding(value: Any) -> Optional[Encoding]:
    if value is None:
        return None
    if isinstance(value, Encoding):
        return value
    text = str(value).strip().lower().replace("+", "")
    if not text:
        return None
    try:
        return Encoding(text)
    except ValueError as exc:
        choices = ", ".join(item.value for item in Encoding)
        raise ValueError(f"encoding must be one of: {choices}") from exc


class ParameterSlot:
    """A named file input that only accepts paths in its allowed formats."""

    def __init__(self, role: str, label: str, allowed_formats: Tuple[FormatTag, ...]) -> None:
        self.role = role
        self.label = label
        self.allowed_formats = tuple(allowed_formats)
        self._value: Optional[Path] = None
        self._listeners: List[SlotListener] = []

    @property
    def value(self) -> Optional[Path]:
        return self._value

    def accepts(self, path: Pathish) -> bool:
        return matches_any(path, self.allowed_formats)

    def set(self, value: Optional[Pathish]) -> None:
        new_value = Path(value) if value is not None else None
        if new_value is not None and not self.accepts(new_value):
            allowed = ", ".join(fmt.value for fmt in self.allowed_formats)
            raise ValueError(f"{self.label}: '{new_value.name}' is not a {allowed} file")
        old_value = self._value
        if new_value == old_value:
            return
        self._value = new_value
        for listener in list(self._listeners):
            listener(self, old_value, new_value)

    def subscribe(self, listener: SlotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


@dataclass(frozen=True)
class ParameterSnapshot:
    forward_reads: Optional[Path]
    reverse_reads: Optional[Path]
    reference_genome: Optional[Path]
    dbsnp: Optional[Path]
    mills: Optional[Path]
    phase1: Optional[Path]
    encoding: Optional[Encoding]


class ParameterStore:
    def __init__(self, slots: Dict[str, ParameterSlot]) -> None:
        self.slots = slots
        self.encoding: Optional[Encoding] = None

    @classmethod
    def create(cls, store: Optional[Any] = None) -> "ParameterStore":
        """Build the standard slots, seeding and persisting the keyed ones through ``store``."""
        params = cls({spec.role: ParameterSlot(spec.role, spec.label, spec.formats) for spec in SLOT_SPECS})
        if store is not None:
            for spec in SLOT_SPECS:
                if spec.persisted_key:
                    bind_persisted_default(params.slot(spec.role), store, spec.persisted_key)
        return params

    def slot(self, role: str) -> ParameterSlot:
        try:
            return self.slots[role]
        except KeyError as exc:
            raise ValueError(f"Unknown parameter '{role}'") from exc

    def get(self, role: str) -> Optional[Path]:
        return self.slot(role).value

    def set(self, role: str, value: Optional[Pathish]) -> None:
        self.slot(role).set(value)

    def set_encoding(self, value: Any) -> None:
        self.encoding = parse_encoding(value)

    def snapshot(self) -> ParameterSnapshot:
        return ParameterSnapshot(
            forward_reads=self.get(FORWARD),
            reverse_reads=self.get(REVERSE),
            reference_genome=self.get(GENOME),
            dbsnp=self.get(DBSNP),
            mills=self.get(MILLS),
            phase1=self.get(PHASE1),
            encoding=self.encoding,
        )

    def describe(self) -> List[Dict[str, object]]:
        return [
            {
                "role": slot.role,
                "label": slot.label,
                "formats": [fmt.value for fmt in slot.allowed_formats],
                "filters": [
                    {"description": fmt.description, "extensions": list(fmt.extensions)}
                    for fmt in slot.allowed_formats
                ],
                "path": str(slot.value) if slot.value is not None else None,
            }
            for slot in self.slots.values()
        ]


def bind_persisted_default(slot: ParameterSlot, store: Any, key: str) -> Callable[[], None]:
    stored = store.get(key)
    if stored:
        try:
            slot.set(stored)
        except ValueError:
            logger.warning("Ignoring persisted %s=%r: not a valid %s file", key, stored, slot.label)

    def _persist(_slot: ParameterSlot, _old: Optional[Path], new: Optional[Path]) -> None:
        if new is None:
            return
        store.set(key, str(new.absolute()))
        logger.debug("Persisted %s=%s", key, new)

    return slot.subscribe(_persist)
