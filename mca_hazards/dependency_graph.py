"""
Dependency Graph Builder for llvm-mca Timelines

Builds the register RAW dependency DAG over the instructions of one timeline
and derives graph metrics from it:
1. Per-instruction dependsOn / dependents lists (bidirectional)
2. Critical path (longest chain of RAW edges)
3. Hot registers that carry the most dependencies
4. Parallelism potential

Algorithm: single left-to-right pass with a last-writer map keyed by register
alias class. A potential hazard is recorded only if the writer was still in
flight (execution end >= reader's dispatch). Missing timing on either side
means the edge is recorded anyway.

Edges only point to strictly earlier trace positions, so the graph is acyclic
by construction and trace order is a topological order.
"""

import json
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, List, Sequence, Tuple

import networkx as nx

from .operands import OperandRoles, parse_instruction_operands
from .registers import alias_class
from .timeline import Instruction

if TYPE_CHECKING:
    from .analysis import AnalysisResult


class HazardType(Enum):
    """Types of data hazards tracked between instructions."""
    RAW = "Read-After-Write"   # True dependency: must wait for write to complete


@dataclass
class DependencyRecord:
    """Dependency information for the instruction at one trace position."""
    position: int
    instruction: Instruction
    depends_on: List[int] = field(default_factory=list)
    dependents: List[int] = field(default_factory=list)
    dependency_types: Dict[int, HazardType] = field(default_factory=dict)
    dependency_registers: Dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "index": self.instruction.index,
            "iteration": self.instruction.iteration,
            "depends_on": [
                {
                    "position": p,
                    "type": self.dependency_types[p].name,
                    "register": self.dependency_registers.get(p),
                }
                for p in self.depends_on
            ],
            "dependents": list(self.dependents),
        }


@dataclass(frozen=True)
class DependencyEdge:
    """Represents a single dependency edge in the DAG."""
    from_position: int   # Writer
    to_position: int     # Reader
    register: str
    hazard_type: HazardType


@dataclass
class RegisterStats:
    """Statistics for a single register alias class."""
    name: str
    write_count: int = 0
    read_count: int = 0
    dep_count: int = 0  # Number of dependencies carried

    @property
    def total_accesses(self) -> int:
        return self.write_count + self.read_count


@dataclass
class DependencyGraphStats:
    """Metrics derived from the dependency graph."""
    total_instructions: int
    total_dependencies: int
    instructions_with_dependencies: int

    # Critical path analysis
    critical_path_length: int
    critical_path: List[int]

    # Hot registers
    hot_registers: List[RegisterStats]

    # Parallelism metrics
    parallelism_potential: float  # Instructions / critical path length
    max_parallel_width: int       # Widest level of the DAG
    dependency_density: float     # deps / max possible edges

    total_stall_cycles: int = 0

    def to_dict(self) -> dict:
        return {
            "total_instructions": self.total_instructions,
            "total_dependencies": self.total_dependencies,
            "instructions_with_dependencies": self.instructions_with_dependencies,
            "critical_path_length": self.critical_path_length,
            "critical_path": self.critical_path[:50],  # Limit output
            "hot_registers": [
                {
                    "register": r.name,
                    "deps": r.dep_count,
                    "writes": r.write_count,
                    "reads": r.read_count,
                }
                for r in self.hot_registers[:20]
            ],
            "parallelism_potential": round(self.parallelism_potential, 2),
            "max_parallel_width": self.max_parallel_width,
            "dependency_density": round(self.dependency_density, 6),
            "total_stall_cycles": self.total_stall_cycles,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def writer_in_flight(writer: Instruction, reader: Instruction) -> bool:
    """
    True if the writer had not finished executing when the reader dispatched.

    Without both timing values the hazard is assumed to be real.
    """
    execution_end = writer.timing.execution_end_cycle
    dispatch = reader.timing.dispatch_cycle
    if execution_end is None or dispatch is None:
        return True
    return execution_end >= dispatch


def build_dependency_graph(
    instructions: Sequence[Instruction],
    roles: Sequence[OperandRoles],
) -> List[DependencyRecord]:
    """
    Resolve RAW dependencies in one pass over the trace.

    Args:
        instructions: Instructions in trace order
        roles: Source/destination registers for each instruction, same order

    Returns:
        One DependencyRecord per trace position
    """
    dependencies = [
        DependencyRecord(position=i, instruction=instr)
        for i, instr in enumerate(instructions)
    ]

    # Register alias class -> position of the most recent writer
    last_writer: Dict[str, int] = {}

    for i, (instr, ops) in enumerate(zip(instructions, roles)):
        record = dependencies[i]

        for src in ops.sources:
            writer = last_writer.get(alias_class(src))
            if writer is None or writer in record.dependency_types:
                continue
            if not writer_in_flight(instructions[writer], instr):
                continue

            record.depends_on.append(writer)
            record.dependency_types[writer] = HazardType.RAW
            record.dependency_registers[writer] = src
            dependencies[writer].dependents.append(i)

        # Last writer wins, no tracking of multiple pending writers
        for dst in ops.destinations:
            last_writer[alias_class(dst)] = i

    return dependencies


def iter_edges(dependencies: Sequence[DependencyRecord]) -> Iterator[DependencyEdge]:
    """Yield every edge, ordered by reader position."""
    for record in dependencies:
        for writer in record.depends_on:
            yield DependencyEdge(
                from_position=writer,
                to_position=record.position,
                register=record.dependency_registers[writer],
                hazard_type=record.dependency_types[writer],
            )


def compute_critical_path(
    n_instructions: int,
    edges: Sequence[DependencyEdge],
) -> Tuple[int, List[int]]:
    """
    Compute the longest chain of dependent instructions.

    Dynamic programming over edges ordered by reader position; trace order is
    already topological since edges only point backward.

    Returns:
        (critical_path_length, critical_path_positions)
    """
    if n_instructions == 0:
        return 0, []

    dist = [1] * n_instructions
    pred = [-1] * n_instructions

    for edge in edges:
        if dist[edge.from_position] + 1 > dist[edge.to_position]:
            dist[edge.to_position] = dist[edge.from_position] + 1
            pred[edge.to_position] = edge.from_position

    critical_path_length = max(dist)
    end = dist.index(critical_path_length)

    path = []
    curr = end
    while curr != -1:
        path.append(curr)
        curr = pred[curr]
    path.reverse()

    return critical_path_length, path


def compute_parallelism_metrics(
    n_instructions: int,
    edges: Sequence[DependencyEdge],
) -> Tuple[float, int]:
    """
    Parallelism potential = instructions / critical path length, plus the
    width of the widest level of the DAG.
    """
    if n_instructions == 0:
        return 0.0, 0

    level = [0] * n_instructions
    for edge in edges:
        level[edge.to_position] = max(level[edge.to_position], level[edge.from_position] + 1)

    critical_path = max(level) + 1

    level_counts: Dict[int, int] = defaultdict(int)
    for lvl in level:
        level_counts[lvl] += 1

    return n_instructions / critical_path, max(level_counts.values())


def collect_register_stats(result: "AnalysisResult") -> Dict[str, RegisterStats]:
    """Reads, writes and carried dependencies per register alias class."""
    stats: Dict[str, RegisterStats] = {}

    def entry(reg: str) -> RegisterStats:
        key = alias_class(reg)
        if key not in stats:
            stats[key] = RegisterStats(name=key)
        return stats[key]

    for instr in result.instructions:
        ops = parse_instruction_operands(instr.text, result.assembly_syntax)
        for reg in ops.sources:
            entry(reg).read_count += 1
        for reg in ops.destinations:
            entry(reg).write_count += 1

    for edge in iter_edges(result.dependencies):
        entry(edge.register).dep_count += 1

    return stats


def find_hot_registers(result: "AnalysisResult", top_n: int = 20) -> List[RegisterStats]:
    """Find registers that carry the most dependencies."""
    sorted_regs = sorted(
        collect_register_stats(result).values(),
        key=lambda r: (-r.dep_count, -r.total_accesses, r.name),
    )
    return sorted_regs[:top_n]


def compute_graph_stats(result: "AnalysisResult", top_n: int = 20) -> DependencyGraphStats:
    """Main entry point for graph metrics over one analysis result."""
    n = result.total_instructions
    edges = list(iter_edges(result.dependencies))

    critical_path_length, critical_path = compute_critical_path(n, edges)
    parallelism_potential, max_parallel_width = compute_parallelism_metrics(n, edges)

    max_deps = n * (n - 1) // 2  # Maximum possible edges in a DAG
    density = len(edges) / max_deps if max_deps > 0 else 0.0

    return DependencyGraphStats(
        total_instructions=n,
        total_dependencies=len(edges),
        instructions_with_dependencies=sum(1 for d in result.dependencies if d.depends_on),
        critical_path_length=critical_path_length,
        critical_path=critical_path,
        hot_registers=find_hot_registers(result, top_n),
        parallelism_potential=parallelism_potential,
        max_parallel_width=max_parallel_width,
        dependency_density=density,
        total_stall_cycles=sum(i.timing.stall_count for i in result.instructions),
    )


def build_networkx_graph(result: "AnalysisResult") -> nx.DiGraph:
    """
    Build a NetworkX DiGraph: one node per trace position, one edge per RAW
    dependency pointing from writer to reader.
    """
    G = nx.DiGraph()

    for pos, instr in enumerate(result.instructions):
        G.add_node(
            pos,
            index=instr.index,
            iteration=instr.iteration,
            instruction=instr.text,
        )

    for edge in iter_edges(result.dependencies):
        G.add_edge(
            edge.from_position,
            edge.to_position,
            register=edge.register,
            hazard=edge.hazard_type.name,
        )

    return G


def export_graphml(result: "AnalysisResult", output_path: str) -> None:
    nx.write_graphml(build_networkx_graph(result), output_path)


def _dot_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\t", " ")


def export_dot(
    result: "AnalysisResult",
    output_path: str,
    max_nodes: int = 500,
) -> Tuple[int, int]:
    """
    Export dependency graph to DOT format for visualization with Graphviz.

    Usage: dot -Tpng output.dot -o graph.png

    Returns:
        (nodes_written, edges_written)
    """
    edges = list(iter_edges(result.dependencies))
    _, critical_path = compute_critical_path(result.total_instructions, edges)
    critical_set = set(critical_path)
    prefix = "%" if result.assembly_syntax.value == "att" else ""

    n_nodes = min(max_nodes, result.total_instructions)
    edge_count = 0

    with open(output_path, "w") as f:
        f.write("digraph DependencyGraph {\n")
        f.write("  rankdir=TB;\n")
        f.write("  node [shape=box, fontsize=10];\n")
        f.write("  edge [fontsize=8];\n")
        f.write("\n")

        for pos, instr in enumerate(result.instructions[:n_nodes]):
            # Highlight critical path nodes
            style = 'style="filled", fillcolor="red"' if pos in critical_set else ""
            label = f"[{instr.iteration},{instr.index}]\\n{_dot_escape(instr.text)}"
            f.write(f'  n{pos} [label="{label}" {style}];\n')

        f.write("\n")

        for edge in edges:
            if edge.from_position >= n_nodes or edge.to_position >= n_nodes:
                continue
            is_critical = edge.from_position in critical_set and edge.to_position in critical_set
            color = 'color="red", penwidth=2' if is_critical else ""
            f.write(f'  n{edge.from_position} -> n{edge.to_position} '
                    f'[label="{prefix}{edge.register}" {color}];\n')
            edge_count += 1

        f.write("}\n")

    return n_nodes, edge_count
