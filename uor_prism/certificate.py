"""
Certificates: attestations that a derivation re-verifies.

Validity is recomputed, never asserted. A certificate for a derivation that
does not reproduce is still issued, with ``valid=False``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Sequence, Tuple

from .address import content_id
from .derivation import Derivation, verify_derivation
from .ring import Ring
from .term import Term

logger = logging.getLogger(__name__)

CERT_URN = "urn:uor:cert:"


@dataclass(frozen=True)
class Certificate:
    certificate_id: str
    certified_iri: str
    derivation_id: str
    valid: bool
    issued_at: str
    cert_chain: Tuple[str, ...]

    def to_jsonld(self) -> Dict[str, Any]:
        return {
            "@id": self.certificate_id,
            "@type": "DerivationCertificate",
            "certifies": {"@id": self.certified_iri},
            "derivation": {"@id": self.derivation_id},
            "valid": self.valid,
            "issuedAt": self.issued_at,
            "certChain": list(self.cert_chain),
        }


def issue_certificate(
    derivation: Derivation,
    ring: Ring,
    original_term: Term,
    parent_chain: Sequence[str] = (),
) -> Certificate:
    """Re-verify ``derivation`` against ``original_term`` and attest the outcome."""
    valid = verify_derivation(ring, derivation, original_term)
    cid = content_id({
        "derivationId": derivation.derivation_id,
        "resultIri": derivation.result_iri,
        "valid": valid,
    })
    if not valid:
        logger.warning("Derivation %s does not reproduce; certificate marked invalid",
                       derivation.derivation_id)

    return Certificate(
        certificate_id=CERT_URN + cid[:24],
        certified_iri=derivation.result_iri,
        derivation_id=derivation.derivation_id,
        valid=valid,
        issued_at=datetime.now(timezone.utc).isoformat(),
        cert_chain=tuple(parent_chain) + (derivation.derivation_id,),
    )


def verify_certificate(
    certificate: Certificate,
    ring: Ring,
    original_term: Term,
    derivation: Derivation,
) -> bool:
    """
    Valid iff the derivation still reproduces, the certificate names it, and
    the certificate was valid when issued. Never upgrades an invalid certificate.
    """
    if not certificate.valid:
        return False
    if certificate.derivation_id != derivation.derivation_id:
        return False
    return verify_derivation(ring, derivation, original_term)
