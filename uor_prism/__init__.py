"""
UOR Prism

The computational kernel of the UOR content-addressed identity standard:
a ring over fixed-width byte tuples, a canonicalizer for terms over its
signature, a coherence verifier, and the derivation / certificate / receipt
pipeline that turns canonical terms into reproducible audit records.

Scales from Quantum 0 (8-bit) to arbitrary Quantum N (8×(N+1) bits).
"""

from .canonical import canonicalize, rewrite
from .certificate import Certificate, issue_certificate, verify_certificate
from .coherence import CoherenceResult, VerificationMode, verify_coherence
from .derivation import Derivation, derive, evaluate, verify_derivation
from .epistemic import EpistemicGrade
from .errors import (
    CoherenceViolation,
    HashUnavailable,
    InvalidRingWidth,
    UnboundVariable,
    UnknownOperation,
    UORError,
    ValidationError,
)
from .receipt import Receipt, generate_receipt
from .ring import Q, Q0, Q1, Q2, Q3, Ring, RingConfig
from .term import Const, Nary, Term, Unary, Var, make_term, serialize

__version__ = "0.1.0"

__all__ = [
    "canonicalize", "rewrite",
    "Certificate", "issue_certificate", "verify_certificate",
    "CoherenceResult", "VerificationMode", "verify_coherence",
    "Derivation", "derive", "evaluate", "verify_derivation",
    "EpistemicGrade",
    "CoherenceViolation", "HashUnavailable", "InvalidRingWidth",
    "UnboundVariable", "UnknownOperation", "UORError", "ValidationError",
    "Receipt", "generate_receipt",
    "Q", "Q0", "Q1", "Q2", "Q3", "Ring", "RingConfig",
    "Const", "Nary", "Term", "Unary", "Var", "make_term", "serialize",
]
