"""
Operand extraction and source/destination role classification.

Two layers:
1. extract_registers_from_operand: one operand's text -> registers it names,
   plus whether it is a memory reference (handles complex addressing:
   disp(%base,%index,scale) and [base+index*scale+disp])
2. parse_instruction_operands: a whole instruction -> registers it reads
   (sources) and registers it writes (destinations), driven by the dialect
   and a static mnemonic family table

Memory-addressing registers are always sources: they are read to compute the
address. The memory location itself is never tracked.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .registers import normalize_register
from .syntax import AssemblySyntax


REGISTER_SHAPE = re.compile(r"^%?([a-z]+[0-9]*[a-z]*)$")
ATT_MEMORY = re.compile(r"\(([^)]+)\)")
INTEL_MEMORY = re.compile(r"\[([^\]]+)\]")
INTEL_REGISTER_TOKEN = re.compile(r"\b([a-z]+[0-9]*[a-z]*)\b")
PURE_INTEGER = re.compile(r"^[0-9]+$")
MNEMONIC_AND_OPERANDS = re.compile(r"^([a-z][a-z0-9]*)\s+(.*)$")

# Skipped when splitting the mnemonic from its operands
INSTRUCTION_PREFIXES = frozenset({
    "lock", "rep", "repe", "repz", "repne", "repnz", "notrack", "data16",
})

_OPENERS = "([{"
_CLOSERS = ")]}"


class MnemonicFamily(Enum):
    """How an instruction's operands map to reads and writes."""
    COMPARE = "compare"                         # All operands read-only
    PUSH = "push"                               # Operand is read
    POP = "pop"                                 # Operand is written
    TWO_OPERAND_MOVE_LIKE = "two_operand_move"  # Destination written only
    TWO_OPERAND_RMW = "two_operand_rmw"         # Destination read and written
    SINGLE_OPERAND_RMW = "single_operand_rmw"   # Sole operand read and written
    UNCLASSIFIED = "unclassified"               # No operands / unparseable


COMPARE_PREFIXES = ("cmp", "test", "bt", "ucomis", "comis", "vucomis", "vcomis")
MOVE_LIKE_PREFIXES = ("mov", "vmov", "lea")
PUSH_PATTERN = re.compile(r"^push[wlq]?$")
POP_PATTERN = re.compile(r"^pop[wlq]?$")


@dataclass(frozen=True)
class OperandInfo:
    """Registers named by one operand."""
    registers: Tuple[str, ...] = ()
    is_memory: bool = False
    memory_expression: Optional[str] = None


@dataclass(frozen=True)
class OperandRoles:
    """Registers an instruction reads and writes, in operand order, no repeats."""
    sources: Tuple[str, ...] = ()
    destinations: Tuple[str, ...] = ()


def extract_registers_from_operand(operand: str) -> OperandInfo:
    operand = operand.strip()

    # Direct register reference
    match = REGISTER_SHAPE.match(operand)
    if match:
        return OperandInfo(registers=(match.group(1),))

    # AT&T memory: offset(%base,%index,scale), (%base), (,%index,scale)
    if "(" in operand:
        registers = []
        mem = ATT_MEMORY.search(operand)
        if mem:
            for part in mem.group(1).split(","):
                part = part.strip()
                if not part or PURE_INTEGER.match(part) or part.startswith("$"):
                    continue
                reg = REGISTER_SHAPE.match(part)
                if reg:
                    registers.append(reg.group(1))
        return OperandInfo(tuple(registers), True, operand)

    # Intel memory: [base+index*scale+offset]
    if "[" in operand:
        registers = []
        mem = INTEL_MEMORY.search(operand)
        if mem:
            registers = INTEL_REGISTER_TOKEN.findall(mem.group(1))
        return OperandInfo(tuple(registers), True, operand)

    # Immediates, labels with punctuation, anything else
    return OperandInfo()


def split_instruction(instruction: str) -> Optional[Tuple[str, str]]:
    """Split 'mnemonic operands' into its two parts, skipping prefixes like lock/rep."""
    match = MNEMONIC_AND_OPERANDS.match(instruction.strip())
    if not match:
        return None
    mnemonic, operand_str = match.group(1), match.group(2)
    if mnemonic in INSTRUCTION_PREFIXES:
        return split_instruction(operand_str)
    return mnemonic, operand_str


def split_operands(operand_str: str) -> List[str]:
    """Split on commas outside (), [] and {}; addressing expressions have their own commas."""
    ops = []
    current = []
    depth = 0

    for char in operand_str:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth = max(0, depth - 1)
        elif char == "," and depth == 0:
            ops.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    last = "".join(current).strip()
    if last:
        ops.append(last)
    return ops


def classify_mnemonic(mnemonic: str, operand_count: int) -> MnemonicFamily:
    if operand_count == 0:
        return MnemonicFamily.UNCLASSIFIED
    if mnemonic.startswith(COMPARE_PREFIXES):
        return MnemonicFamily.COMPARE
    if PUSH_PATTERN.match(mnemonic):
        return MnemonicFamily.PUSH
    if POP_PATTERN.match(mnemonic):
        return MnemonicFamily.POP
    if operand_count >= 2:
        if mnemonic.startswith(MOVE_LIKE_PREFIXES):
            return MnemonicFamily.TWO_OPERAND_MOVE_LIKE
        return MnemonicFamily.TWO_OPERAND_RMW
    return MnemonicFamily.SINGLE_OPERAND_RMW


def _ordered(registers: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(normalize_register(r) for r in registers))


def parse_instruction_operands(instruction: str, syntax: AssemblySyntax) -> OperandRoles:
    """
    Classify the registers of one instruction as sources and destinations.

    AT&T operand order is source, destination; Intel is destination, source.
    Operands past the second only contribute their addressing registers.
    """
    split = split_instruction(instruction)
    if split is None:
        return OperandRoles()

    mnemonic, operand_str = split
    ops = [extract_registers_from_operand(op) for op in split_operands(operand_str)]
    family = classify_mnemonic(mnemonic, len(ops))

    sources: List[str] = []
    destinations: List[str] = []

    if family == MnemonicFamily.COMPARE:
        for op in ops:
            sources.extend(op.registers)

    elif family == MnemonicFamily.PUSH:
        sources.extend(ops[0].registers)

    elif family == MnemonicFamily.POP:
        if ops[0].is_memory:
            sources.extend(ops[0].registers)
        else:
            destinations.extend(ops[0].registers)

    elif family in (MnemonicFamily.TWO_OPERAND_MOVE_LIKE, MnemonicFamily.TWO_OPERAND_RMW):
        if syntax == AssemblySyntax.ATT:
            src_op, dst_op = ops[0], ops[1]
        else:
            dst_op, src_op = ops[0], ops[1]

        sources.extend(src_op.registers)

        if dst_op.is_memory:
            sources.extend(dst_op.registers)
        else:
            destinations.extend(dst_op.registers)
            if family == MnemonicFamily.TWO_OPERAND_RMW:
                sources.extend(dst_op.registers)

        for extra in ops[2:]:
            if extra.is_memory:
                sources.extend(extra.registers)

    elif family == MnemonicFamily.SINGLE_OPERAND_RMW:
        sources.extend(ops[0].registers)
        if not ops[0].is_memory:
            destinations.extend(ops[0].registers)

    return OperandRoles(sources=_ordered(sources), destinations=_ordered(destinations))
