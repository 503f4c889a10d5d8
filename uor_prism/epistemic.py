"""Epistemic grades: how a fact came to be known."""

from enum import Enum


class EpistemicGrade(Enum):
    """
    A: Algebraically Proven. Derivation id from derive(), ring coherence verified.
    B: Graph-Certified. Certificate issued after shape validation.
    C: Graph-Present. Datum in graph with a source, no derivation id.
    D: LLM-Generated / Unverified. No derivation, no certificate.

    Only A is assigned by the kernel. The other grades belong to callers that
    record non-algebraic facts.
    """
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def agent_behavior(self) -> str:
        return _BEHAVIOR[self]

    def outranks(self, other: 'EpistemicGrade') -> bool:
        return self.value < other.value


_LABELS = {
    EpistemicGrade.A: "Algebraically Proven",
    EpistemicGrade.B: "Graph-Certified",
    EpistemicGrade.C: "Graph-Present",
    EpistemicGrade.D: "LLM-Generated / Unverified",
}

_BEHAVIOR = {
    EpistemicGrade.A: "Cite with full confidence, include derivation ID.",
    EpistemicGrade.B: "Cite with high confidence, certificate IRI provided.",
    EpistemicGrade.C: "Cite with moderate confidence, flag 'not algebraically verified'.",
    EpistemicGrade.D: "Explicitly flag as unverified, route to derive() for verification.",
}
