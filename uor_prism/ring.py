"""
Ring arithmetic over fixed-width byte tuples.

Carrier set: Z/(2^bits)Z presented as big-endian byte tuples, where
bits = 8 × (quantum + 1).

Signature Σ (primitive operations):
  - neg  : unary  (additive inverse, -x mod 2^bits)
  - bnot : unary  (bitwise complement, ~x)
  - xor  : binary (bitwise exclusive or)
  - and  : binary (bitwise and)
  - or   : binary (bitwise or)

The two primitive INVOLUTIONS are neg and bnot. succ and pred are
DERIVED from them and are never computed any other way:

  succ(x) = neg(bnot(x))
  pred(x) = bnot(neg(x))

add/sub/mul are ordinary modular arithmetic, provided for callers.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from .errors import InvalidRingWidth, ValidationError

ByteTuple = Tuple[int, ...]
Operand = Union[int, ByteTuple]

BYTE_BITS = 8


def to_bytes(n: int, bits: int) -> ByteTuple:
    """Convert integer to a big-endian byte tuple of the given bit width, reducing mod 2^bits."""
    if bits <= 0 or bits % BYTE_BITS:
        raise InvalidRingWidth(f"Bit width must be a positive multiple of 8, got {bits}")
    n &= (1 << bits) - 1
    return tuple(n.to_bytes(bits // BYTE_BITS, byteorder="big", signed=False))


def from_bytes(b: ByteTuple) -> int:
    """Convert a big-endian byte tuple to an integer."""
    return int.from_bytes(bytes(b), byteorder="big")


@dataclass(frozen=True)
class RingConfig:
    """Size parameters of the ring at one quantum level."""
    quantum: int
    width: int
    bits: int
    cycle: int
    mask: int

    @classmethod
    def for_quantum(cls, quantum: int) -> 'RingConfig':
        if isinstance(quantum, bool) or not isinstance(quantum, int):
            raise InvalidRingWidth(f"Quantum must be an integer, got {quantum!r}")
        if quantum < 0:
            raise InvalidRingWidth(f"Quantum must be non-negative, got {quantum}")
        width = quantum + 1
        bits = BYTE_BITS * width
        cycle = 1 << bits
        return cls(quantum=quantum, width=width, bits=bits, cycle=cycle, mask=cycle - 1)


class Ring:
    """
    Exact arithmetic at one quantum level.

    Quantum 0: 8-bit   (256 states)
    Quantum 1: 16-bit  (65,536 states)
    Quantum 2: 24-bit  (16,777,216 states)
    Quantum 3: 32-bit  (4,294,967,296 states)
    ...

    Instances are read-mostly and may be shared. The only mutable state is
    the ``verified`` flag, which moves from False to True once ``verify()``
    succeeds and is never cleared.
    """

    # Sorted for deterministic output
    SIGNATURE = ("and", "bnot", "neg", "or", "xor")
    INVOLUTIONS = ("bnot", "neg")
    DERIVED_OPS = ("pred", "succ")

    def __init__(self, quantum: int = 0):
        self.config = RingConfig.for_quantum(quantum)
        self._verified = False

    @classmethod
    def from_config(cls, config: RingConfig) -> 'Ring':
        return cls(config.quantum)

    @property
    def quantum(self) -> int:
        return self.config.quantum

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def bits(self) -> int:
        return self.config.bits

    @property
    def cycle(self) -> int:
        return self.config.cycle

    @property
    def mask(self) -> int:
        return self.config.mask

    @property
    def verified(self) -> bool:
        return self._verified

    def __repr__(self) -> str:
        return f"Ring(quantum={self.quantum}, verified={self._verified})"

    # ═══════════════════════════════════════════════════════════════════════════
    # REPRESENTATION
    # ═══════════════════════════════════════════════════════════════════════════

    def _validate_bytes(self, b: ByteTuple) -> ByteTuple:
        """Validate byte tuple: correct width, each byte in [0, 255]."""
        if len(b) != self.width:
            raise ValidationError(f"Expected {self.width} bytes, got {len(b)}")
        for i, x in enumerate(b):
            if isinstance(x, bool) or not isinstance(x, int) or not (0 <= x <= 0xFF):
                raise ValidationError(f"Byte {i} out of range: {x!r}")
        return b

    def to_bytes(self, n: int) -> ByteTuple:
        return to_bytes(n, self.bits)

    def from_bytes(self, b: ByteTuple) -> int:
        return from_bytes(self._validate_bytes(tuple(b)))

    def normalize(self, n: Operand) -> ByteTuple:
        """Normalize input to a validated byte tuple. Integers are reduced mod cycle."""
        if isinstance(n, int) and not isinstance(n, bool):
            return self.to_bytes(n)
        return self._validate_bytes(tuple(n))

    # ═══════════════════════════════════════════════════════════════════════════
    # PRIMITIVE SIGNATURE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    def neg(self, n: Operand) -> ByteTuple:
        """Additive inverse (two's complement). PRIMITIVE INVOLUTION."""
        val = from_bytes(self.normalize(n))
        return self.to_bytes((self.cycle - val) & self.mask)

    def bnot(self, n: Operand) -> ByteTuple:
        """Bitwise complement (per byte). PRIMITIVE INVOLUTION."""
        return tuple(byte ^ 0xFF for byte in self.normalize(n))

    def xor(self, a: Operand, b: Operand) -> ByteTuple:
        """XOR (per byte). Commutative, associative."""
        return tuple(x ^ y for x, y in zip(self.normalize(a), self.normalize(b)))

    def band(self, a: Operand, b: Operand) -> ByteTuple:
        """AND (per byte). Commutative, associative."""
        return tuple(x & y for x, y in zip(self.normalize(a), self.normalize(b)))

    def bor(self, a: Operand, b: Operand) -> ByteTuple:
        """OR (per byte). Commutative, associative."""
        return tuple(x | y for x, y in zip(self.normalize(a), self.normalize(b)))

    # ═══════════════════════════════════════════════════════════════════════════
    # DERIVED OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    def succ(self, n: Operand) -> ByteTuple:
        """Increment (DERIVED: succ = neg ∘ bnot). CRITICAL IDENTITY."""
        return self.neg(self.bnot(n))

    def pred(self, n: Operand) -> ByteTuple:
        """Decrement (DERIVED: pred = bnot ∘ neg)."""
        return self.bnot(self.neg(n))

    def add(self, a: Operand, b: Operand) -> ByteTuple:
        return self.to_bytes(from_bytes(self.normalize(a)) + from_bytes(self.normalize(b)))

    def sub(self, a: Operand, b: Operand) -> ByteTuple:
        return self.to_bytes(from_bytes(self.normalize(a)) - from_bytes(self.normalize(b)))

    def mul(self, a: Operand, b: Operand) -> ByteTuple:
        return self.to_bytes(from_bytes(self.normalize(a)) * from_bytes(self.normalize(b)))

    # ═══════════════════════════════════════════════════════════════════════════
    # DIAGNOSTICS
    # ═══════════════════════════════════════════════════════════════════════════

    def stratum(self, n: Operand) -> int:
        """Hamming weight summed across bytes."""
        return sum(byte.bit_count() for byte in self.normalize(n))

    def spectrum(self, n: Operand) -> Tuple[Tuple[int, ...], ...]:
        """Active bit positions per byte."""
        return tuple(
            tuple(i for i in range(BYTE_BITS) if byte & (1 << i))
            for byte in self.normalize(n)
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # VERIFICATION
    # ═══════════════════════════════════════════════════════════════════════════

    def verify(self):
        """
        Check the ring laws and record the outcome.

        Exhaustive over all 256 elements at quantum 0; boundary values plus
        fixed pseudo-random samples at wider rings. Returns the
        CoherenceResult of a collecting run. The verified flag is only ever
        raised, never lowered.
        """
        from .coherence import verify_coherence

        result = verify_coherence(self)
        if result.verified:
            self._verified = True
        return result


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

def Q0() -> Ring: return Ring(quantum=0)
def Q1() -> Ring: return Ring(quantum=1)
def Q2() -> Ring: return Ring(quantum=2)
def Q3() -> Ring: return Ring(quantum=3)
def Q(n: int) -> Ring: return Ring(quantum=n)
