import unittest

from mca_hazards.timeline import TimingInfo, analyze_timeline_pattern, parse_timeline_line


class TimelineLineTests(unittest.TestCase):
    def test_parses_iteration_index_pattern_and_text(self):
        line = "[1,3]     D=eeER   .   vaddps\t%xmm0, %xmm1, %xmm2"
        instr = parse_timeline_line(line)

        self.assertIsNotNone(instr)
        self.assertEqual(instr.iteration, 1)
        self.assertEqual(instr.index, 3)
        self.assertEqual(instr.timeline_pattern, "     D=eeER   .   ")
        self.assertEqual(instr.text, "vaddps\t%xmm0, %xmm1, %xmm2")
        self.assertEqual(instr.mnemonic, "vaddps")
        self.assertEqual(instr.raw_line, line)

    def test_execution_markers_are_not_mistaken_for_the_mnemonic(self):
        instr = parse_timeline_line("[0,1]     D=====eeeeeeeeER    .    .   movss\t(%rax), %xmm0")
        self.assertEqual(instr.text, "movss\t(%rax), %xmm0")
        self.assertTrue(instr.timeline_pattern.endswith("ER    .    .   "))

    def test_intel_operands(self):
        instr = parse_timeline_line("[0,0]     DeER .    mov\trbx, qword ptr [rax + 8]")
        self.assertEqual(instr.text, "mov\trbx, qword ptr [rax + 8]")

    def test_rejects_non_timeline_lines(self):
        self.assertIsNone(parse_timeline_line(""))
        self.assertIsNone(parse_timeline_line("Index     0123456789"))
        self.assertIsNone(parse_timeline_line("[0]: Executions"))
        self.assertIsNone(parse_timeline_line("Timeline view:"))

    def test_rejects_lines_without_instruction_text(self):
        self.assertIsNone(parse_timeline_line("[0,0]     DeER"))
        self.assertIsNone(parse_timeline_line("[0,0]     DeER   ret"))

    def test_parser_leaves_timing_empty(self):
        instr = parse_timeline_line("[0,0]     DeER .    movq\t%rax, %rbx")
        self.assertEqual(instr.timing, TimingInfo())


class TimingPatternTests(unittest.TestCase):
    def test_named_cycles(self):
        timing = analyze_timeline_pattern("D=eeE-R")
        self.assertEqual(timing.dispatch_cycle, 0)
        self.assertEqual(timing.execution_start_cycle, 2)
        self.assertEqual(timing.execution_end_cycle, 4)
        self.assertEqual(timing.retire_cycle, 6)
        self.assertEqual(timing.stall_cycles, (1,))
        self.assertEqual(timing.total_cycles, 7)

    def test_offsets_include_leading_idle_columns(self):
        timing = analyze_timeline_pattern("     .DeE--R  ")
        self.assertEqual(timing.dispatch_cycle, 6)
        self.assertEqual(timing.execution_start_cycle, 7)
        self.assertEqual(timing.execution_end_cycle, 8)
        self.assertEqual(timing.retire_cycle, 11)
        self.assertEqual(timing.total_cycles, 14)

    def test_first_e_and_last_E_win(self):
        timing = analyze_timeline_pattern("DeEeER")
        self.assertEqual(timing.execution_start_cycle, 1)
        self.assertEqual(timing.execution_end_cycle, 4)

    def test_every_stall_is_recorded(self):
        timing = analyze_timeline_pattern("D=====eER")
        self.assertEqual(timing.stall_cycles, (1, 2, 3, 4, 5))
        self.assertEqual(timing.stall_count, 5)

    def test_missing_markers_are_none(self):
        timing = analyze_timeline_pattern("     D====     ")
        self.assertEqual(timing.dispatch_cycle, 5)
        self.assertIsNone(timing.execution_start_cycle)
        self.assertIsNone(timing.execution_end_cycle)
        self.assertIsNone(timing.retire_cycle)

    def test_empty_pattern(self):
        self.assertEqual(analyze_timeline_pattern(""), TimingInfo())


if __name__ == "__main__":
    unittest.main()
