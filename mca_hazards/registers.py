"""
x86-64 Register Alias Table

Static knowledge of which register spellings name the same physical storage.
Used by the dependency resolver to decide whether a read of one spelling
(e.g. %eax) depends on a write of another (e.g. %rax).

Coverage:
1. General purpose registers: 64/32/16/8-bit views, including the legacy
   high-byte names (ah, bh, ch, dh)
2. Vector registers: xmm ⊂ ymm ⊂ zmm, indices 0-31

Partial-width writes are treated as full aliases: writing %al is assumed to
redefine all of %rax. This is a known precision gap.
"""

from typing import Dict, Tuple


# Canonical identity -> every spelling that refers to (part of) it
_LEGACY_GPRS: Dict[str, Tuple[str, ...]] = {
    "rax": ("rax", "eax", "ax", "al", "ah"),
    "rbx": ("rbx", "ebx", "bx", "bl", "bh"),
    "rcx": ("rcx", "ecx", "cx", "cl", "ch"),
    "rdx": ("rdx", "edx", "dx", "dl", "dh"),
    "rsi": ("rsi", "esi", "si", "sil"),
    "rdi": ("rdi", "edi", "di", "dil"),
    "rbp": ("rbp", "ebp", "bp", "bpl"),
    "rsp": ("rsp", "esp", "sp", "spl"),
}

_EXTENDED_GPRS: Dict[str, Tuple[str, ...]] = {
    f"r{n}": (f"r{n}", f"r{n}d", f"r{n}w", f"r{n}b")
    for n in range(8, 16)
}

N_VECTOR_REGISTERS = 32

_VECTOR_REGISTERS: Dict[str, Tuple[str, ...]] = {
    f"zmm{n}": (f"zmm{n}", f"ymm{n}", f"xmm{n}")
    for n in range(N_VECTOR_REGISTERS)
}

REGISTER_ALIASES: Dict[str, Tuple[str, ...]] = {
    **_LEGACY_GPRS,
    **_EXTENDED_GPRS,
    **_VECTOR_REGISTERS,
}

# Reverse index: spelling -> canonical identity
_CANONICAL: Dict[str, str] = {
    spelling: base
    for base, spellings in REGISTER_ALIASES.items()
    for spelling in spellings
}


def normalize_register(name: str) -> str:
    """Strip the AT&T '%' prefix and surrounding whitespace."""
    name = name.strip()
    if name.startswith("%"):
        name = name[1:]
    return name.lower()


def is_known_register(name: str) -> bool:
    return normalize_register(name) in _CANONICAL


def alias_class(name: str) -> str:
    """
    Return the canonical identity for a register spelling.

    Registers outside the table (rip, mask registers, x87 stack) map to
    their own normalized name, so they are still tracked by literal identity.
    """
    reg = normalize_register(name)
    return _CANONICAL.get(reg, reg)


def are_aliased(reg1: str, reg2: str) -> bool:
    """True iff both spellings appear in the same identity's spelling set."""
    base1 = _CANONICAL.get(normalize_register(reg1))
    base2 = _CANONICAL.get(normalize_register(reg2))
    return base1 is not None and base1 == base2
