"""
Terms: syntax trees over the ring signature.

A term is NOT a value until evaluated. Four node kinds form a closed set:

  Const(value)             integer constant, reduced mod 2^bits on canonicalization
  Var(name)                free variable; canonicalizes but cannot be evaluated
  Unary(op, operand)       op ∈ {neg, bnot, succ, pred}
  Nary(op, operands)       op ∈ {xor, and, or}; operands form a multiset under rewriting

Comparison and ordering of terms always go through ``serialize()``.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .errors import UnknownOperation, ValidationError

UNARY_OPS = frozenset({"neg", "bnot", "succ", "pred"})
NARY_OPS = frozenset({"xor", "and", "or"})
INVOLUTIONS = frozenset({"neg", "bnot"})

_VAR_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Const:
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(f"Constant must be an integer, got {self.value!r}")

    def __str__(self) -> str:
        return serialize(self)


@dataclass(frozen=True)
class Var:
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not _VAR_NAME.match(self.name):
            raise ValidationError(f"Invalid variable name: {self.name!r}")

    def __str__(self) -> str:
        return serialize(self)


@dataclass(frozen=True)
class Unary:
    op: str
    operand: 'Term'

    def __post_init__(self):
        if self.op not in UNARY_OPS:
            raise UnknownOperation(f"Unknown unary operation: {self.op}")
        _check_term(self.operand)

    def __str__(self) -> str:
        return serialize(self)


@dataclass(frozen=True)
class Nary:
    op: str
    operands: Tuple['Term', ...]

    def __post_init__(self):
        if self.op not in NARY_OPS:
            raise UnknownOperation(f"Unknown n-ary operation: {self.op}")
        object.__setattr__(self, "operands", tuple(self.operands))
        for operand in self.operands:
            _check_term(operand)

    def __str__(self) -> str:
        return serialize(self)


Term = Union[Const, Var, Unary, Nary]


def _check_term(t: Any) -> None:
    if not isinstance(t, (Const, Var, Unary, Nary)):
        raise ValidationError(f"Not a term: {t!r}")


def make_term(operation: str, *operands: Union[Term, int, str]) -> Term:
    """
    Construct a term from an operation name and operands.

    Integers become constants and strings become variables, so
    ``make_term("xor", 0x55, "x")`` is ``xor(0x55, ?x)``.
    """
    args = tuple(_coerce(op) for op in operands)
    if operation in UNARY_OPS:
        if len(args) != 1:
            raise ValidationError(f"{operation} takes exactly one operand, got {len(args)}")
        return Unary(operation, args[0])
    if operation in NARY_OPS:
        return Nary(operation, args)
    raise UnknownOperation(f"Unknown operation: {operation}")


def _coerce(t: Union[Term, int, str]) -> Term:
    if isinstance(t, (Const, Var, Unary, Nary)):
        return t
    if isinstance(t, str):
        return Var(t)
    return Const(t)


# ═══════════════════════════════════════════════════════════════════════════════
# SERIALIZATION
# ═══════════════════════════════════════════════════════════════════════════════

def _hex(value: int, width: int) -> str:
    digits = width * 2
    if value < 0:
        return f"-0x{-value:0{digits}x}"
    return f"0x{value:0{digits}x}"


def serialize(term: Term, width: int = 1) -> str:
    """
    Deterministic serialization used for ordering, equality and hashing.

    Format: op(arg1,arg2,...) with constants as hex zero-padded to the ring
    width and variables as ?name. Constants are not reduced here: callers that
    need canonical text serialize a canonicalized term.
    """
    if isinstance(term, Const):
        return _hex(term.value, width)
    if isinstance(term, Var):
        return f"?{term.name}"
    if isinstance(term, Unary):
        return f"{term.op}({serialize(term.operand, width)})"
    if isinstance(term, Nary):
        args = ",".join(serialize(op, width) for op in term.operands)
        return f"{term.op}({args})"
    raise UnknownOperation(f"Unknown term node: {term!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TermMetrics:
    """
    Structural metrics for a term (syntax tree).

    These are properties of the term itself, independent of
    which datum it evaluates to.
    """
    depth: int
    node_count: int
    op_counts: Tuple[Tuple[str, int], ...]

    @classmethod
    def from_op_dict(cls, depth: int, node_count: int, op_counts: Dict[str, int]) -> 'TermMetrics':
        """Create from a mutable op_counts dict."""
        return cls(
            depth=depth,
            node_count=node_count,
            op_counts=tuple(sorted(op_counts.items()))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "depth": self.depth,
            "nodeCount": self.node_count,
            "opCounts": dict(self.op_counts)
        }


def term_metrics(term: Term) -> TermMetrics:
    """Compute structural metrics for a term."""
    if isinstance(term, (Const, Var)):
        return TermMetrics.from_op_dict(depth=0, node_count=1, op_counts={})

    children = (term.operand,) if isinstance(term, Unary) else term.operands
    op_counts: Dict[str, int] = {term.op: 1}
    max_child_depth = 0
    total_nodes = 1

    for child in children:
        child_metrics = term_metrics(child)
        max_child_depth = max(max_child_depth, child_metrics.depth)
        total_nodes += child_metrics.node_count
        for op, count in child_metrics.op_counts:
            op_counts[op] = op_counts.get(op, 0) + count

    return TermMetrics.from_op_dict(
        depth=1 + max_child_depth,
        node_count=total_nodes,
        op_counts=op_counts
    )


# ═══════════════════════════════════════════════════════════════════════════════
# STRUCTURE (JSON-LD shaped dicts)
# ═══════════════════════════════════════════════════════════════════════════════

def term_to_structure(term: Term, base_iri: str) -> Dict[str, Any]:
    if isinstance(term, Const):
        return {"@type": "Constant", "value": term.value}
    if isinstance(term, Var):
        return {"@type": "Variable", "name": term.name}
    children = (term.operand,) if isinstance(term, Unary) else term.operands
    return {
        "@type": "TermNode",
        "operation": {"@id": f"{base_iri}op/{term.op}"},
        "operands": [term_to_structure(child, base_iri) for child in children],
    }


def term_from_structure(data: Any) -> Term:
    """
    Rebuild a term from its structure.

    Accepts the output of ``term_to_structure`` as well as the shorthand of
    bare integers for constants and bare strings for variables. An operation
    may be given as ``{"@id": ".../op/xor"}`` or as the plain name.
    """
    if isinstance(data, (int, str)) and not isinstance(data, bool):
        return _coerce(data)
    if not isinstance(data, dict):
        raise ValidationError(f"Cannot read term from {data!r}")

    kind = data.get("@type")
    if kind == "Constant":
        return Const(data.get("value"))
    if kind == "Variable":
        return Var(data.get("name"))
    if kind == "TermNode":
        operation = data.get("operation")
        if isinstance(operation, dict):
            operation = operation.get("@id", "")
        if not isinstance(operation, str):
            raise ValidationError(f"Invalid operation: {operation!r}")
        operation = operation.rsplit("/", 1)[-1]
        operands = data.get("operands", [])
        if not isinstance(operands, list):
            raise ValidationError("operands must be a list")
        return make_term(operation, *(term_from_structure(op) for op in operands))
    raise ValidationError(f"Unknown term type: {kind!r}")
