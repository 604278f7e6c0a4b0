#!/usr/bin/env python3
"""
Register dependency analyzer for llvm-mca timelines

Reads an llvm-mca report produced with -timeline and reconstructs register
read-after-write dependencies between the traced instructions, using the
per-cycle markers to keep only hazards where the writer was still executing
when the reader dispatched.

Usage:
    mca-hazards report.txt                    # Summary + dependency metrics
    mca-hazards report.txt --timeline         # Per-instruction dependencies
    mca-hazards report.txt --instruction 3    # One instruction's neighbours
    mca-hazards report.txt --json             # JSON output
    llvm-mca -timeline foo.s | mca-hazards -  # Read from stdin
"""

import argparse
import json
import sys
from typing import List, Optional

from .analysis import analyze_dependencies
from .dependency_graph import compute_graph_stats, export_dot, export_graphml
from .report import get_printer
from .syntax import AssemblySyntax


def read_trace(path: str) -> str:
    """Read the report from a file, or stdin for '-'."""
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mca-hazards",
        description="Analyze register dependencies in an llvm-mca timeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    mca-hazards report.txt                        # Basic analysis
    mca-hazards report.txt --timeline             # Show every instruction
    mca-hazards report.txt --instruction 4        # Dependencies of position 4
    mca-hazards report.txt --json                 # JSON output
    mca-hazards report.txt --dot graph.dot        # Export DOT file
    mca-hazards report.txt --graphml graph.xml    # Export GraphML
    mca-hazards report.txt --syntax intel         # Skip dialect detection
        """
    )
    parser.add_argument("trace", help="llvm-mca report file, or - for stdin")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of human-readable")
    parser.add_argument("--dot", metavar="FILE", help="Export graph to DOT file for Graphviz")
    parser.add_argument("--graphml", metavar="FILE", help="Export graph to GraphML file")
    parser.add_argument("--top", "-n", type=int, default=10, help="Number of hot registers to show")
    parser.add_argument("--instruction", "-i", type=int, metavar="POS",
                        help="Show dependencies of the instruction at trace position POS")
    parser.add_argument("--syntax", choices=[s.value for s in AssemblySyntax],
                        help="Assembly dialect (default: detect from the trace)")
    parser.add_argument("--timeline", "-t", action="store_true",
                        help="Show every timeline instruction with its dependencies")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress progress messages")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    def progress(message: str):
        if not args.quiet:
            print(message, file=sys.stderr)

    progress("Reading trace...")
    try:
        text = read_trace(args.trace)
    except OSError as e:
        print(f"Error: cannot read {args.trace}: {e}", file=sys.stderr)
        return 1

    syntax = AssemblySyntax(args.syntax) if args.syntax else None
    result = analyze_dependencies(text, syntax=syntax)
    progress(f"Parsed {result.total_instructions} instructions, "
             f"detected {result.assembly_syntax.name} syntax")
    progress(f"Found {result.total_dependencies} total dependencies")

    if args.instruction is not None and not 0 <= args.instruction < result.total_instructions:
        print(f"Error: no instruction at position {args.instruction} "
              f"(trace has {result.total_instructions})", file=sys.stderr)
        return 1

    stats = compute_graph_stats(result, top_n=max(args.top, 0))

    if args.dot:
        nodes, edges = export_dot(result, args.dot)
        progress(f"Exported DOT graph to {args.dot} ({nodes} nodes, {edges} edges)")

    if args.graphml:
        export_graphml(result, args.graphml)
        progress(f"Exported GraphML to {args.graphml}")

    if args.json:
        output = result.to_dict()
        output["graph"] = stats.to_dict()
        print(json.dumps(output, indent=2))
        return 0

    printer = get_printer(not args.no_color)
    printer.print_summary(result)
    printer.print_dependency_stats(result, stats, top_n=args.top)

    if args.timeline:
        printer.print_timeline(result)

    if args.instruction is not None:
        printer.print_instruction(result, args.instruction)

    return 0


if __name__ == "__main__":
    sys.exit(main())
