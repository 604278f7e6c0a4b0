"""Human-readable reports: plain text and Rich."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analysis import (
    AnalysisResult,
    describe_instruction,
    format_dependencies,
    get_dependencies_for_instruction,
    register_label,
)
from .dependency_graph import DependencyGraphStats
from .mca_output import SummaryMetrics


SUMMARY_ROWS = (
    ("Iterations", "iterations"),
    ("Instructions", "instructions"),
    ("Total Cycles", "total_cycles"),
    ("Total uOps", "total_uops"),
    ("Dispatch Width", "dispatch_width"),
    ("uOps Per Cycle", "uops_per_cycle"),
    ("IPC", "ipc"),
    ("Block RThroughput", "block_rthroughput"),
)


def _metric(summary: SummaryMetrics, name: str) -> str:
    value = getattr(summary, name)
    if value is None:
        return "N/A"
    if isinstance(value, float):
        return f"{value:g}"
    return f"{value:,}"


def _dependency_list(result: AnalysisResult, position: int) -> str:
    record = result.dependencies[position]
    parts = []
    for writer in record.depends_on:
        reg = register_label(record.dependency_registers[writer], result.assembly_syntax)
        parts.append(f"[{result.instructions[writer].index}]:"
                     f"{record.dependency_types[writer].name} on {reg}")
    return ", ".join(parts)


def _path_preview(path, limit: int = 10) -> str:
    path_str = " -> ".join(str(p) for p in path[:limit])
    if len(path) > limit:
        path_str += f" -> ... ({len(path)} total)"
    return path_str


class PlainPrinter:
    """Plain text output without Rich."""

    def print_header(self, text: str):
        print("=" * 70)
        print(text)
        print("=" * 70)

    def print_subheader(self, text: str):
        print()
        print("-" * 70)
        print(text)
        print("-" * 70)

    def print_summary(self, result: AnalysisResult):
        self.print_header("LLVM-MCA SUMMARY")
        for label, name in SUMMARY_ROWS:
            print(f"{label + ':':<20} {_metric(result.summary, name)}")

    def print_dependency_stats(self, result: AnalysisResult, stats: DependencyGraphStats,
                               top_n: int = 10):
        self.print_subheader(f"DEPENDENCY ANALYSIS ({result.assembly_syntax.name} syntax)")
        print(f"Instructions:           {stats.total_instructions:,}")
        print(f"RAW Dependencies:       {stats.total_dependencies:,}")
        print(f"With Dependencies:      {stats.instructions_with_dependencies:,}")
        print(f"Stall Cycles:           {stats.total_stall_cycles:,}")
        print(f"Critical Path Length:   {stats.critical_path_length}")
        if stats.critical_path:
            print(f"Critical Path:          {_path_preview(stats.critical_path)}")
        print(f"Parallelism Potential:  {stats.parallelism_potential:.2f}x")
        print(f"Max Parallel Width:     {stats.max_parallel_width}")

        hot = [r for r in stats.hot_registers[:top_n] if r.dep_count > 0]
        if not hot:
            return

        self.print_subheader(f"TOP {top_n} HOT REGISTERS (most dependencies)")
        print(f"{'Register':<12} {'Deps':>10} {'Writes':>10} {'Reads':>10}")
        print("-" * 70)
        for reg in hot:
            print(f"{reg.name:<12} {reg.dep_count:>10} {reg.write_count:>10} {reg.read_count:>10}")

    def print_timeline(self, result: AnalysisResult):
        self.print_subheader("TIMELINE")
        if not result.instructions:
            print("(No timeline found in output)")
            return
        for pos, instr in enumerate(result.instructions):
            deps = _dependency_list(result, pos)
            marker = "*" if deps else " "
            print(f"{marker}{pos:>4} [{instr.iteration},{instr.index}]"
                  f"{instr.timeline_pattern}{instr.text}")
            if deps:
                print(f"{'':>6}depends on {deps}")

    def print_instruction(self, result: AnalysisResult, position: int):
        self.print_subheader(f"INSTRUCTION AT POSITION {position}")
        print(format_dependencies(get_dependencies_for_instruction(result, position)))
        print()
        print(describe_instruction(result, position))


class RichPrinter:
    """Rich-enabled colorful output."""

    def __init__(self):
        self.console = Console()

    def print_header(self, text: str):
        self.console.print(Panel(text, style="bold cyan", box=box.DOUBLE))

    def print_subheader(self, text: str):
        self.console.print(f"\n[bold yellow]{text}[/bold yellow]")
        self.console.print("-" * 70)

    def print_summary(self, result: AnalysisResult):
        self.print_header("LLVM-MCA SUMMARY")

        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        for label, name in SUMMARY_ROWS:
            table.add_row(label, _metric(result.summary, name))
        self.console.print(table)

    def print_dependency_stats(self, result: AnalysisResult, stats: DependencyGraphStats,
                               top_n: int = 10):
        self.print_subheader(f"DEPENDENCY ANALYSIS ({result.assembly_syntax.name} syntax)")

        table = Table(show_header=False, box=box.SIMPLE)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Instructions", f"{stats.total_instructions:,}")
        table.add_row("RAW Dependencies", f"{stats.total_dependencies:,}")
        table.add_row("With Dependencies", f"{stats.instructions_with_dependencies:,}")
        table.add_row("Stall Cycles", f"{stats.total_stall_cycles:,}")
        table.add_row("Critical Path Length", f"[bold magenta]{stats.critical_path_length}[/bold magenta]")
        if stats.critical_path:
            table.add_row("Critical Path", _path_preview(stats.critical_path))
        table.add_row("Parallelism Potential", f"{stats.parallelism_potential:.2f}x")
        table.add_row("Max Parallel Width", f"{stats.max_parallel_width}")
        self.console.print(table)

        hot = [r for r in stats.hot_registers[:top_n] if r.dep_count > 0]
        if not hot:
            return

        self.print_subheader(f"TOP {top_n} HOT REGISTERS")

        reg_table = Table(box=box.ROUNDED)
        reg_table.add_column("Register", style="cyan")
        reg_table.add_column("Deps", justify="right", style="red")
        reg_table.add_column("Writes", justify="right")
        reg_table.add_column("Reads", justify="right")
        for reg in hot:
            reg_table.add_row(reg.name, f"{reg.dep_count:,}", f"{reg.write_count:,}",
                              f"{reg.read_count:,}")
        self.console.print(reg_table)

    def print_timeline(self, result: AnalysisResult):
        self.print_subheader("TIMELINE")
        if not result.instructions:
            self.console.print("[dim](No timeline found in output)[/dim]")
            return

        table = Table(box=box.SIMPLE_HEAD)
        table.add_column("Pos", justify="right")
        table.add_column("[It,Idx]")
        table.add_column("Timeline", no_wrap=True)
        table.add_column("Instruction", style="cyan", no_wrap=True)
        table.add_column("Depends on", style="red")

        for pos, instr in enumerate(result.instructions):
            deps = _dependency_list(result, pos)
            # Orange marks instructions that wait on an earlier writer
            style = "orange1" if deps else None
            table.add_row(
                str(pos),
                Text(f"[{instr.iteration},{instr.index}]", style=style or ""),
                Text(instr.timeline_pattern.rstrip()),
                Text(instr.text),
                Text(deps),
            )
        self.console.print(table)

    def print_instruction(self, result: AnalysisResult, position: int):
        deps = get_dependencies_for_instruction(result, position)
        self.console.print(Panel(
            Text(format_dependencies(deps)),
            title=f"[bold]Position {position}[/bold]",
            border_style="cyan",
        ))
        self.console.print(Text(describe_instruction(result, position) or "", style="dim"))


def get_printer(use_rich: bool = True):
    """Get the printer for the requested output style."""
    if use_rich:
        return RichPrinter()
    return PlainPrinter()
