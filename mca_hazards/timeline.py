"""
Timeline line parsing and timing pattern analysis.

A timeline line from llvm-mca looks like:

    [0,1]     D=====eeeeeeeeER    .    .    .    .  .   movss	(%rax), %xmm0

    [iteration,index]  per-cycle markers  instruction text

Marker alphabet (one character per cycle, 0-indexed):
    D  dispatched
    e  executing (first 'e' = execution start)
    E  executed (last 'E' = execution end)
    R  retired (last 'R' wins)
    =  waiting to execute (stall)
    -  executed, waiting to retire
    .  idle / ruler
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple


INDEX_PATTERN = re.compile(r"\[(\d+),(\d+)\]")

# Lowercase-led mnemonic, optional width suffix, whitespace, then operands.
# The leftmost match wins, so markers such as 'e' inside the timeline are
# skipped as long as they are not followed by whitespace and more text.
INSTRUCTION_PATTERN = re.compile(r"([a-z][a-z0-9]*[qwlbsd]?\s+\S.*)$")


@dataclass(frozen=True)
class TimingInfo:
    """Named cycle indices decoded from a timeline pattern."""
    dispatch_cycle: Optional[int] = None
    execution_start_cycle: Optional[int] = None
    execution_end_cycle: Optional[int] = None
    retire_cycle: Optional[int] = None
    stall_cycles: Tuple[int, ...] = ()
    total_cycles: int = 0

    @property
    def stall_count(self) -> int:
        return len(self.stall_cycles)

    def to_dict(self) -> dict:
        return {
            "dispatch_cycle": self.dispatch_cycle,
            "execution_start_cycle": self.execution_start_cycle,
            "execution_end_cycle": self.execution_end_cycle,
            "retire_cycle": self.retire_cycle,
            "stall_cycles": list(self.stall_cycles),
            "total_cycles": self.total_cycles,
        }


@dataclass(frozen=True)
class Instruction:
    """One decoded timeline entry."""
    iteration: int
    index: int              # Static program-order position
    timeline_pattern: str   # Raw marker string between ']' and the mnemonic
    text: str               # Trimmed mnemonic + operand list
    timing: TimingInfo = field(default_factory=TimingInfo)
    raw_line: str = field(default="", compare=False)

    @property
    def mnemonic(self) -> str:
        return self.text.split(None, 1)[0] if self.text else ""

    def to_dict(self) -> dict:
        return {
            "iteration": self.iteration,
            "index": self.index,
            "timeline": self.timeline_pattern,
            "instruction": self.text,
            "timing": self.timing.to_dict(),
        }


def parse_timeline_line(line: str) -> Optional[Instruction]:
    """
    Parse one trace line into an Instruction (without timing).

    Returns None when the line is not a timeline line: no [iteration,index]
    pair, or no trailing instruction text.
    """
    index_match = INDEX_PATTERN.search(line)
    if not index_match:
        return None

    instr_match = INSTRUCTION_PATTERN.search(line, index_match.end())
    if not instr_match:
        return None

    return Instruction(
        iteration=int(index_match.group(1)),
        index=int(index_match.group(2)),
        timeline_pattern=line[index_match.end():instr_match.start()],
        text=instr_match.group(1).strip(),
        raw_line=line,
    )


def analyze_timeline_pattern(timeline: str) -> TimingInfo:
    """Decode the per-cycle marker string into named cycle indices."""
    dispatch_cycle = None
    execution_start = None
    execution_end = None
    retire_cycle = None
    stall_cycles = []

    for cycle, char in enumerate(timeline):
        if char == "D":
            if dispatch_cycle is None:
                dispatch_cycle = cycle
        elif char == "e":
            if execution_start is None:
                execution_start = cycle
        elif char == "E":
            execution_end = cycle
        elif char == "R":
            retire_cycle = cycle
        elif char == "=":
            stall_cycles.append(cycle)

    return TimingInfo(
        dispatch_cycle=dispatch_cycle,
        execution_start_cycle=execution_start,
        execution_end_cycle=execution_end,
        retire_cycle=retire_cycle,
        stall_cycles=tuple(stall_cycles),
        total_cycles=len(timeline),
    )
