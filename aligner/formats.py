from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, Tuple, Union


class FormatTag(str, Enum):
    FASTQ = "fastq"
    FASTA = "fasta"
    VCF = "vcf"
    BAM = "bam"

    @property
    def extensions(self) -> Tuple[str, ...]:
        return FORMAT_EXTENSIONS[self]

    @property
    def description(self) -> str:
        return FORMAT_DESCRIPTIONS[self]


FORMAT_EXTENSIONS = {
    FormatTag.FASTQ: (".fastq", ".fq", ".fastq.gz", ".fq.gz"),
    FormatTag.FASTA: (".fasta", ".fa", ".fna", ".fasta.gz", ".fa.gz"),
    FormatTag.VCF: (".vcf", ".vcf.gz"),
    FormatTag.BAM: (".bam",),
}

FORMAT_DESCRIPTIONS = {
    FormatTag.FASTQ: "FASTQ sequences",
    FormatTag.FASTA: "FASTA reference",
    FormatTag.VCF: "Variant Call Format",
    FormatTag.BAM: "Binary Alignment Map",
}

BAM_EXTENSION = FORMAT_EXTENSIONS[FormatTag.BAM][0]


def matches_format(path: Union[str, Path], fmt: FormatTag) -> bool:
    name = Path(path).name.lower()
    return any(name.endswith(ext) and len(name) > len(ext) for ext in fmt.extensions)


def matches_any(path: Union[str, Path], formats: Iterable[FormatTag]) -> bool:
    return any(matches_format(path, fmt) for fmt in formats)
