"""
Assembly dialect detection.

AT&T syntax: registers prefixed with %, immediates with $, width-suffixed
mnemonics, source-destination order (movq %rax, %rbx).
Intel syntax: no % prefix, destination-source order (mov rbx, rax).

Classification is a trace-level majority vote, not per-line detection.
Mixed-dialect traces are not supported and will be misclassified.
"""

import re
from enum import Enum
from typing import Iterable

from .timeline import Instruction


class AssemblySyntax(Enum):
    """The two textual conventions for x86 assembly operands."""
    ATT = "att"
    INTEL = "intel"


ATT_INDICATORS = (
    re.compile(r"%[a-z]"),          # Prefixed register
    re.compile(r"\$[0-9]"),         # Immediate marker
    re.compile(r"[a-z]+[qwlb]\s"),  # Width-suffixed mnemonic
)

INTEL_MNEMONIC_SHAPE = re.compile(r"[a-z]+\s+[a-z]")


def count_syntax_indicators(instructions: Iterable[Instruction]):
    """Return (att_indicators, intel_indicators) over all instructions."""
    att_indicators = 0
    intel_indicators = 0

    for instr in instructions:
        text = instr.text
        for pattern in ATT_INDICATORS:
            if pattern.search(text):
                att_indicators += 1

        # Less reliable: absence of AT&T markers plus a bare "mnemonic reg" shape
        if "%" not in text and INTEL_MNEMONIC_SHAPE.search(text):
            intel_indicators += 1

    return att_indicators, intel_indicators


def detect_assembly_syntax(instructions: Iterable[Instruction]) -> AssemblySyntax:
    att, intel = count_syntax_indicators(instructions)
    return AssemblySyntax.ATT if att > intel else AssemblySyntax.INTEL
