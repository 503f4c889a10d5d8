"""
Receipts: self-verifying wrappers around a derivation.

Every receipt derives the term twice, independently, and compares hashes of
the two outputs. Any nondeterminism (iteration order, clock leakage, stale
state) shows up as ``self_verified=False``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from .address import compute_cid, content_id
from .derivation import Derivation, derive
from .ring import Ring
from .term import Term, serialize

logger = logging.getLogger(__name__)

RECEIPT_URN = "urn:uor:receipt:"


@dataclass(frozen=True)
class Receipt:
    receipt_id: str
    module_id: str
    operation: str
    input_hash: str
    output_hash: str
    recompute_hash: str
    self_verified: bool
    coherence_verified: bool
    timestamp: str

    def to_jsonld(self) -> Dict[str, Any]:
        return {
            "@id": self.receipt_id,
            "@type": "CanonicalReceipt",
            "moduleId": self.module_id,
            "operation": self.operation,
            "inputHash": self.input_hash,
            "outputHash": self.output_hash,
            "recomputeHash": self.recompute_hash,
            "selfVerified": self.self_verified,
            "coherenceVerified": self.coherence_verified,
            "timestamp": self.timestamp,
        }


def _output_hash(derivation: Derivation) -> str:
    return content_id({
        "derivationId": derivation.derivation_id,
        "resultValue": derivation.result_value,
        "resultIri": derivation.result_iri,
    })[:32]


def generate_receipt(module_id: str, ring: Ring, term: Term) -> Tuple[Derivation, Receipt]:
    """
    Derive ``term`` and wrap the result in a receipt.

    ``coherence_verified`` mirrors the ring's verified flag at call time;
    coherence is not re-run here.
    """
    operation = serialize(term, ring.width)
    timestamp = datetime.now(timezone.utc).isoformat()
    input_hash = content_id({"term": operation, "quantum": ring.quantum})[:32]

    derivation = derive(ring, term)
    output_hash = _output_hash(derivation)

    recomputed = derive(ring, term)
    recompute_hash = _output_hash(recomputed)

    self_verified = recompute_hash == output_hash
    if not self_verified:
        logger.warning("Receipt for %s failed self-verification: %s != %s",
                       operation, output_hash, recompute_hash)

    receipt_id = RECEIPT_URN + compute_cid(f"{module_id}:{operation}:{timestamp}".encode("utf-8"))[:24]
    return derivation, Receipt(
        receipt_id=receipt_id,
        module_id=module_id,
        operation=operation,
        input_hash=input_hash,
        output_hash=output_hash,
        recompute_hash=recompute_hash,
        self_verified=self_verified,
        coherence_verified=ring.verified,
        timestamp=timestamp,
    )
