"""llvm-mca style reports shared by the test modules."""

SUMMARY_HEADER = """\
[0] Code Region

Iterations:        1
Instructions:      2
Total Cycles:      9
Total uOps:        2

Dispatch Width:    4
uOps Per Cycle:    0.22
IPC:               0.22
Block RThroughput: 0.5


"""

WAIT_TIMES_FOOTER = """\


Average Wait times (based on the timeline view):
[0]: Executions
[1]: Average time spent waiting in a scheduler's queue

      [0]    [1]    [2]    [3]
0.     1     1.0    1.0    0.0       movq	%rax, %rbx
"""

# Writer still executing (E at cycle 11) when the reader dispatches (cycle 5)
ATT_DEPENDENT = SUMMARY_HEADER + """\
Timeline view:
Index     012345678

[0,0]     DeeeeeER.   movq	%rax, %rbx
[0,1]     D=====eER   addq	%rbx, %rcx
""" + WAIT_TIMES_FOOTER

# Writer finished (E at cycle 7) before the reader dispatched (cycle 10)
ATT_INDEPENDENT = """\
Timeline view:
Index     0123456789

[0,0]     DeER .    movq	%rax, %rbx
[0,1]     .    DeER addq	%rbx, %rcx
""" + WAIT_TIMES_FOOTER

# Writer never shows an execution end marker
ATT_MISSING_TIMING = """\
Timeline view:
Index     0123456789

[0,0]     D====     movq	%rax, %rbx
[0,1]     .    DeER addq	%rbx, %rcx
"""

ATT_COMPARE = """\
Timeline view:
Index     0123456789

[0,0]     DeER .    .   movq	%rdx, %rax
[0,1]     DeER .    .   cmpq	%rax, %rbx
[0,2]     D=eER.    .   addq	%rax, %rcx
"""

INTEL_DEPENDENT = """\
Timeline view:
Index     0123456789

[0,0]     DeER .    mov	rbx, rax
[0,1]     D=eER.    add	rcx, rbx
"""

ATT_LOOP = """\
Iterations:        2
Instructions:      12
Total Cycles:      27
Total uOps:        12

Dispatch Width:    4
uOps Per Cycle:    0.44
IPC:               0.44
Block RThroughput: 1.5


Timeline view:
                    0123456789
Index     0123456789          0123456

[0,0]     DeeeeeER  .    .    .    .   vmovss	(%rdi,%rax,4), %xmm1
[0,1]     D=eeeeeeeeeeER .    .    .   vmulss	(%rsi,%rax,4), %xmm1, %xmm1
[0,2]     D===========eeeeER  .    .   vaddss	%xmm1, %xmm0, %xmm0
[0,3]     DeE--------------R  .    .   addq	$1, %rax
[0,4]     .DeE-------------R  .    .   cmpq	%rax, %rdx
[0,5]     .D=eE------------R  .    .   jne	.LBB0_2
[1,0]     .DeeeeeE---------R  .    .   vmovss	(%rdi,%rax,4), %xmm1
[1,1]     .D=eeeeeeeeeeE---R  .    .   vmulss	(%rsi,%rax,4), %xmm1, %xmm1
[1,2]     . D===========eeeeER.    .   vaddss	%xmm1, %xmm0, %xmm0
[1,3]     . DeE--------------R.    .   addq	$1, %rax
[1,4]     . D=eE-------------R.    .   cmpq	%rax, %rdx
[1,5]     .  DeE-------------R.    .   jne	.LBB0_2


Average Wait times (based on the timeline view):
[0]: Executions

Resources:
[0]   - SKLDivider
"""
