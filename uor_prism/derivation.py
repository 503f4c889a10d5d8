"""
Derivations: the single path by which a term becomes a citable fact.

A derivation binds {original term, canonical term, result, metrics}. Its id
is content-addressed from the CANONICAL term and the result IRI, so
semantically equivalent terms produce the same id. Trust comes from
reproducibility: anyone holding the ring and the original term can re-derive
the id. There is no separate signature.

Derivations should only be trusted from a ring whose ``verify()`` has
succeeded. That is a contract for callers; ``derive`` does not enforce it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from .address import content_address, hash_hex
from .canonical import canonicalize
from .epistemic import EpistemicGrade
from .errors import UnboundVariable, UnknownOperation
from .ring import ByteTuple, Ring, from_bytes
from .term import Const, Nary, Term, TermMetrics, Unary, Var, serialize, term_metrics

logger = logging.getLogger(__name__)

DERIVATION_URN = "urn:uor:derivation:sha256:"


@dataclass(frozen=True)
class DerivationMetrics:
    original_complexity: int
    canonical_complexity: int
    reduction_ratio: float

    @classmethod
    def compare(cls, original: Term, canonical: Term) -> 'DerivationMetrics':
        before = term_metrics(original).node_count
        after = term_metrics(canonical).node_count
        ratio = 1 - after / before if before > 0 else 0.0
        return cls(original_complexity=before, canonical_complexity=after, reduction_ratio=ratio)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalComplexity": self.original_complexity,
            "canonicalComplexity": self.canonical_complexity,
            "reductionRatio": self.reduction_ratio,
        }


@dataclass(frozen=True)
class Derivation:
    """
    A derivation (certificate/witness) binding a term to its evaluation.

    Write-once. Create via ``derive()`` to ensure proper canonicalization.
    Multiple derivations can yield the same datum (many terms → one value).
    """
    derivation_id: str
    original_term: str          # serialized as written
    canonical_term: str         # serialized canonical form, input to the id
    result_value: int
    result_iri: str
    quantum: int
    epistemic_grade: EpistemicGrade
    timestamp: str
    metrics: DerivationMetrics
    term_metrics: TermMetrics   # structure of the ORIGINAL term

    def to_jsonld(self) -> Dict[str, Any]:
        """Convert to JSON-LD representation."""
        return {
            "@id": self.derivation_id,
            "@type": "Derivation",
            "quantum": self.quantum,
            "originalTerm": self.original_term,
            "canonicalTerm": self.canonical_term,
            "resultValue": self.result_value,
            "result": {"@id": self.result_iri},
            "epistemicGrade": self.epistemic_grade.value,
            "timestamp": self.timestamp,
            "metrics": self.metrics.to_dict(),
            "termMetrics": self.term_metrics.to_dict(),
        }


def evaluate(term: Term, ring: Ring) -> ByteTuple:
    """Evaluate a term to produce a datum. Raises UnboundVariable on any Var."""
    if isinstance(term, Const):
        return ring.normalize(term.value)
    if isinstance(term, Var):
        raise UnboundVariable(term.name)
    if isinstance(term, Unary):
        operand = evaluate(term.operand, ring)
        if term.op == "neg":
            return ring.neg(operand)
        elif term.op == "bnot":
            return ring.bnot(operand)
        elif term.op == "succ":
            return ring.succ(operand)
        elif term.op == "pred":
            return ring.pred(operand)
    elif isinstance(term, Nary):
        if term.op == "xor":
            result, combine = ring.to_bytes(0), ring.xor
        elif term.op == "and":
            result, combine = ring.to_bytes(ring.mask), ring.band
        elif term.op == "or":
            result, combine = ring.to_bytes(0), ring.bor
        else:
            raise UnknownOperation(f"Unknown operation: {term.op}")
        for operand in term.operands:
            result = combine(result, evaluate(operand, ring))
        return result
    raise UnknownOperation(f"Unknown term: {term!r}")


def derivation_id_for(canonical_text: str, result_iri: str) -> str:
    content = f"{canonical_text}={result_iri}"
    return DERIVATION_URN + hash_hex(content.encode("utf-8"))[:16]


def derive(ring: Ring, term: Term) -> Derivation:
    """
    Create a derivation for a term.

    1. Canonicalize (this MUST precede id computation)
    2. Evaluate the canonical term
    3. Content-address the result
    4. id = sha256("{canonical}={result IRI}")[:16]
    """
    canonical = canonicalize(term, ring.config)
    canonical_text = serialize(canonical, ring.width)
    value = from_bytes(evaluate(canonical, ring))
    result_iri = content_address(ring, value)
    derivation_id = derivation_id_for(canonical_text, result_iri)
    logger.debug("Derived %s: %s = %d", derivation_id, canonical_text, value)

    return Derivation(
        derivation_id=derivation_id,
        original_term=serialize(term, ring.width),
        canonical_term=canonical_text,
        result_value=value,
        result_iri=result_iri,
        quantum=ring.quantum,
        epistemic_grade=EpistemicGrade.A,
        timestamp=datetime.now(timezone.utc).isoformat(),
        metrics=DerivationMetrics.compare(term, canonical),
        term_metrics=term_metrics(term),
    )


def verify_derivation(ring: Ring, derivation: Derivation, original_term: Term) -> bool:
    """Re-derive from the original term and compare ids."""
    return derive(ring, original_term).derivation_id == derivation.derivation_id
