from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .formats import BAM_EXTENSION, FormatTag

logger = logging.getLogger(__name__)

SAVE_TITLE = "Save BAM file"


@dataclass(frozen=True)
class SaveRequest:
    title: str
    initial_name: str
    initial_dir: Optional[Path]
    formats: Tuple[FormatTag, ...] = (FormatTag.BAM,)


Chooser = Callable[[SaveRequest], Optional[Union[str, Path]]]


def strip_extensions(file_name: str) -> str:
    """Drop everything from the first '.' so ``reads.fastq.gz`` becomes ``reads``."""
    index = file_name.find(".")
    if index < 0:
        return file_name
    return file_name[:index]


def ensure_extension(path: Path, extension: str = BAM_EXTENSION) -> Path:
    if not path.name:
        raise ValueError(f"Output path '{path}' has no file name")
    if path.name.endswith(extension):
        return path
    return path.with_name(path.name + extension)


class FixedPathChooser:
    """Chooser answering every request with a path supplied up front, or cancelling."""

    def __init__(self, path: Optional[Union[str, Path]]) -> None:
        text = str(path).strip() if path is not None else ""
        self.path = Path(text) if text else None
        self.requests: List[SaveRequest] = []

    def __call__(self, request: SaveRequest) -> Optional[Path]:
        self.requests.append(request)
        if self.path is None:
            return None
        if not self.path.is_absolute() and request.initial_dir is not None:
            return request.initial_dir / self.path
        return self.path


class OutputResolver:
    def __init__(self, chooser: Chooser, extension: str = BAM_EXTENSION) -> None:
        self.chooser = chooser
        self.extension = extension

    def resolve(self, suggested_base_name: str, source_dir: Optional[Path]) -> Optional[Path]:
        request = SaveRequest(
            title=SAVE_TITLE,
            initial_name=f"{suggested_base_name}{self.extension}",
            initial_dir=source_dir,
        )
        chosen = self.chooser(request)
        if chosen is None:
            logger.debug("Output selection cancelled for %s", request.initial_name)
            return None
        return ensure_extension(Path(chosen), self.extension)

    def resolve_for_source(self, source: Path) -> Optional[Path]:
        return self.resolve(strip_extensions(source.name), source.parent)
