"""Register dependency analysis for llvm-mca timeline traces."""

from .analysis import (
    AnalysisResult,
    analyze_dependencies,
    describe_instruction,
    format_dependencies,
    get_dependencies_for_instruction,
)
from .dependency_graph import DependencyRecord, HazardType
from .registers import are_aliased
from .syntax import AssemblySyntax

__version__ = "0.1.0"
