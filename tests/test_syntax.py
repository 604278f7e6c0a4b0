import unittest

from mca_hazards.syntax import AssemblySyntax, count_syntax_indicators, detect_assembly_syntax
from mca_hazards.timeline import Instruction


def instrs(*texts):
    return [Instruction(iteration=0, index=i, timeline_pattern="", text=t)
            for i, t in enumerate(texts)]


class SyntaxDetectionTests(unittest.TestCase):
    def test_att(self):
        trace = instrs("movq\t%rax, %rbx", "addq\t$1, %rcx")
        self.assertEqual(detect_assembly_syntax(trace), AssemblySyntax.ATT)

    def test_intel(self):
        trace = instrs("mov\trbx, rax", "add\trcx, 1", "imul\trax, rcx")
        self.assertEqual(detect_assembly_syntax(trace), AssemblySyntax.INTEL)

    def test_indicator_counts(self):
        # Prefixed register, immediate marker and width suffix each count once
        self.assertEqual(count_syntax_indicators(instrs("addq\t$1, %rax")), (3, 0))
        self.assertEqual(count_syntax_indicators(instrs("add\trax, 1")), (0, 1))

    def test_tie_goes_to_intel(self):
        self.assertEqual(detect_assembly_syntax([]), AssemblySyntax.INTEL)


if __name__ == "__main__":
    unittest.main()
