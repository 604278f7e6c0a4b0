"""
llvm-mca report sections.

The report text format is owned by llvm-mca. We only recognize:
- the summary block at the top (Iterations, Instructions, Total Cycles, ...)
- the "Timeline view:" section, ended by the first recognized section header

Unknown trailing sections are not treated as boundaries: if no end marker is
found, the timeline window runs to the end of the input.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional


TIMELINE_HEADER = "Timeline view:"

SECTION_END_MARKERS = (
    re.compile(r"Average [Ww]ait times"),
    re.compile(r"^Average Wait Time"),
    re.compile(r"^Resources:"),
    re.compile(r"^Resource pressure"),
    re.compile(r"^Summary:"),
    re.compile(r"^Register File"),
    re.compile(r"^Dispatch Logic"),
    re.compile(r"^Schedulers"),
    re.compile(r"^Instruction Info"),
)

# Metric name -> (pattern, type)
_INT = r"(\d+)"
_FLOAT = r"([\d.]+)"
SUMMARY_PATTERNS = {
    "iterations": (re.compile(r"Iterations:\s*" + _INT), int),
    "instructions": (re.compile(r"Instructions:\s*" + _INT), int),
    "total_cycles": (re.compile(r"Total Cycles:\s*" + _INT), int),
    "total_uops": (re.compile(r"Total uOps:\s*" + _INT), int),
    "dispatch_width": (re.compile(r"Dispatch Width:\s*" + _FLOAT), float),
    "uops_per_cycle": (re.compile(r"uOps Per Cycle:\s*" + _FLOAT), float),
    "ipc": (re.compile(r"IPC:\s*" + _FLOAT), float),
    "block_rthroughput": (re.compile(r"Block RThroughput:\s*" + _FLOAT), float),
}


@dataclass(frozen=True)
class SummaryMetrics:
    """Top-of-report metrics. None means llvm-mca did not print it."""
    iterations: Optional[int] = None
    instructions: Optional[int] = None
    total_cycles: Optional[int] = None
    total_uops: Optional[int] = None
    dispatch_width: Optional[float] = None
    uops_per_cycle: Optional[float] = None
    ipc: Optional[float] = None
    block_rthroughput: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in SUMMARY_PATTERNS)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in SUMMARY_PATTERNS}


@dataclass
class McaOutput:
    """Sections of one llvm-mca report."""
    summary: SummaryMetrics = field(default_factory=SummaryMetrics)
    summary_lines: List[str] = field(default_factory=list)
    timeline_lines: List[str] = field(default_factory=list)


def is_section_end(line: str) -> bool:
    return any(marker.search(line) for marker in SECTION_END_MARKERS)


def iter_timeline_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield the lines inside the timeline window (header excluded)."""
    in_timeline = False
    for line in lines:
        if not in_timeline:
            if TIMELINE_HEADER in line:
                in_timeline = True
            continue
        if is_section_end(line):
            return
        yield line


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_summary_metrics(lines: Iterable[str]) -> SummaryMetrics:
    """Extract the summary metrics; a metric printed twice keeps its last value."""
    values = {}
    for line in lines:
        for name, (pattern, kind) in SUMMARY_PATTERNS.items():
            match = pattern.search(line)
            if match:
                value = int(match.group(1)) if kind is int else _parse_float(match.group(1))
                if value is not None:
                    values[name] = value
                break
    return SummaryMetrics(**values)


def parse_output(output: str) -> McaOutput:
    """Split a raw llvm-mca report into its summary and timeline sections."""
    lines = output.splitlines()
    summary_lines = [
        line for line in lines
        if any(pattern.search(line) for pattern, _ in SUMMARY_PATTERNS.values())
    ]
    return McaOutput(
        summary=parse_summary_metrics(summary_lines),
        summary_lines=summary_lines,
        timeline_lines=list(iter_timeline_lines(lines)),
    )
