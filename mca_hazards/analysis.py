"""
Dependency analysis over one llvm-mca report.

analyze_dependencies() is a pure function of the report text: every call
builds fresh state, nothing is kept between calls, and no input raises.
A report without a timeline yields an empty result.

Pipeline:
    report text -> timeline window lines -> Instruction per line (+ timing)
    -> dialect detection (once) -> operand roles (per instruction)
    -> dependency resolution (one pass) -> AnalysisResult
"""

import dataclasses
import json
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .dependency_graph import DependencyRecord, HazardType, build_dependency_graph
from .mca_output import SummaryMetrics, parse_output
from .operands import parse_instruction_operands
from .syntax import AssemblySyntax, detect_assembly_syntax
from .timeline import Instruction, analyze_timeline_pattern, parse_timeline_line


# Timeline header rows: the "Index  0123456789" legend and the cycle ruler
_INDEX_HEADER = re.compile(r"Index\s+")
_RULER_LINE = re.compile(r"^\s*[0-9]+")


@dataclass
class AnalysisResult:
    """Complete results of one dependency analysis."""
    instructions: List[Instruction] = field(default_factory=list)
    dependencies: List[DependencyRecord] = field(default_factory=list)
    total_instructions: int = 0
    assembly_syntax: AssemblySyntax = AssemblySyntax.INTEL
    summary: SummaryMetrics = field(default_factory=SummaryMetrics)

    @property
    def total_dependencies(self) -> int:
        return sum(len(d.depends_on) for d in self.dependencies)

    def to_dict(self) -> dict:
        return {
            "total_instructions": self.total_instructions,
            "total_dependencies": self.total_dependencies,
            "assembly_syntax": self.assembly_syntax.value,
            "summary": self.summary.to_dict(),
            "instructions": [
                {"position": pos, **instr.to_dict()}
                for pos, instr in enumerate(self.instructions)
            ],
            "dependencies": [d.to_dict() for d in self.dependencies],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class DependencyLink:
    """One neighbour of an instruction in the dependency graph."""
    position: int
    instruction: Instruction
    hazard_type: Optional[HazardType] = None
    register: Optional[str] = None


@dataclass
class InstructionDependencies:
    """What one instruction depends on, and what depends on it."""
    position: int
    instruction: Instruction
    depends_on: List[DependencyLink] = field(default_factory=list)
    dependents: List[DependencyLink] = field(default_factory=list)


def _is_header_line(line: str) -> bool:
    return (
        not line.strip()
        or _INDEX_HEADER.search(line) is not None
        or _RULER_LINE.match(line) is not None
    )


def parse_instructions(timeline_lines: List[str]) -> List[Instruction]:
    """Build timed Instructions from the lines of a timeline window."""
    instructions = []
    for line in timeline_lines:
        if _is_header_line(line):
            continue
        parsed = parse_timeline_line(line)
        if parsed is None:
            continue
        timing = analyze_timeline_pattern(parsed.timeline_pattern)
        instructions.append(dataclasses.replace(parsed, timing=timing))
    return instructions


def analyze_dependencies(
    llvm_mca_output: str,
    syntax: Optional[AssemblySyntax] = None,
) -> AnalysisResult:
    """
    Main entry point: analyze register dependencies in an llvm-mca report.

    Args:
        llvm_mca_output: Raw report text
        syntax: Force a dialect instead of detecting it from the trace

    Returns:
        AnalysisResult with instructions, per-position dependency records,
        detected (or forced) syntax and the report's summary metrics
    """
    sections = parse_output(llvm_mca_output)
    instructions = parse_instructions(sections.timeline_lines)

    if syntax is None:
        syntax = detect_assembly_syntax(instructions)

    roles = [parse_instruction_operands(instr.text, syntax) for instr in instructions]
    dependencies = build_dependency_graph(instructions, roles)

    return AnalysisResult(
        instructions=instructions,
        dependencies=dependencies,
        total_instructions=len(instructions),
        assembly_syntax=syntax,
        summary=sections.summary,
    )


def find_positions(result: AnalysisResult, index: int) -> List[int]:
    """Trace positions of a static instruction index (one per iteration)."""
    return [pos for pos, instr in enumerate(result.instructions) if instr.index == index]


def get_dependencies_for_instruction(
    result: AnalysisResult,
    position: int,
) -> Optional[InstructionDependencies]:
    """Look up the dependency neighbourhood of one trace position."""
    if not 0 <= position < len(result.dependencies):
        return None

    record = result.dependencies[position]
    deps = InstructionDependencies(position=position, instruction=record.instruction)

    for writer in record.depends_on:
        deps.depends_on.append(DependencyLink(
            position=writer,
            instruction=result.instructions[writer],
            hazard_type=record.dependency_types.get(writer),
            register=record.dependency_registers.get(writer),
        ))

    for reader in record.dependents:
        reader_record = result.dependencies[reader]
        deps.dependents.append(DependencyLink(
            position=reader,
            instruction=result.instructions[reader],
            hazard_type=reader_record.dependency_types.get(position),
            register=reader_record.dependency_registers.get(position),
        ))

    return deps


def format_dependencies(deps: Optional[InstructionDependencies]) -> str:
    """Format dependency information for display."""
    if deps is None:
        return "No dependency information available"

    lines = [f"Instruction [{deps.instruction.index}]: {deps.instruction.text}", ""]

    if deps.depends_on:
        lines.append("Depends on:")
        for dep in deps.depends_on:
            lines.append(f"  [{dep.instruction.index}] {dep.instruction.text}")
    else:
        lines.append("No dependencies")

    lines.append("")

    if deps.dependents:
        lines.append("Dependents:")
        for dep in deps.dependents:
            lines.append(f"  [{dep.instruction.index}] {dep.instruction.text}")
    else:
        lines.append("No dependents")

    return "\n".join(lines)


def register_label(register: str, syntax: AssemblySyntax) -> str:
    return f"%{register}" if syntax == AssemblySyntax.ATT else register


def describe_instruction(result: AnalysisResult, position: int) -> Optional[str]:
    """One-line summary, e.g. 'Instr [1]: 1 dependencies [0]:RAW on %rbx [att syntax]'."""
    deps = get_dependencies_for_instruction(result, position)
    if deps is None:
        return None

    details = []
    for dep in deps.depends_on:
        kind = dep.hazard_type.name if dep.hazard_type else "RAW"
        if dep.register:
            details.append(f"[{dep.instruction.index}]:{kind} on "
                           f"{register_label(dep.register, result.assembly_syntax)}")
        else:
            details.append(f"[{dep.instruction.index}]:{kind}")

    details_str = (" " + ", ".join(details)) if details else ""
    return (f"Instr [{deps.instruction.index}]: {len(deps.depends_on)} dependencies"
            f"{details_str} [{result.assembly_syntax.value} syntax]")
