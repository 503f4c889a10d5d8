"""
uor-prism command line.

A thin tool around the kernel: verify a ring, derive terms given as JSON,
and run the canonicalization demo. Every option can also be set through a
UOR_<COMMAND>_<OPTION> environment variable.
"""

import json
import logging
from typing import Any, Dict, Optional

import click

from .address import glyph
from .certificate import issue_certificate
from .coherence import VerificationMode, verify_coherence
from .derivation import derive
from .errors import CoherenceViolation, UORError
from .receipt import generate_receipt
from .ring import Ring
from .term import make_term, term_from_structure

quantum_option = click.option(
    '-q', '--quantum', default=0, type=int, show_default=True,
    help='Quantum level (0=8-bit, 1=16-bit, etc.)')


def _ring(quantum: int) -> Ring:
    try:
        return Ring(quantum=quantum)
    except UORError as e:
        raise click.BadParameter(str(e), param_hint="--quantum")


def _verified_ring(quantum: int) -> Ring:
    ring = _ring(quantum)
    result = ring.verify()
    if not result.verified:
        for failure in result.failures:
            click.echo(f"  ✗ {failure}", err=True)
        raise click.ClickException(f"Ring Q{quantum} failed coherence verification")
    return ring


@click.group()
@click.option('--verbose', is_flag=True, help='Log kernel activity to stderr.')
@click.version_option(package_name="uor-prism")
def main(verbose: bool):
    """
    UOR Prism - verified computation over Z/(2^bits)Z.

    Scales from Quantum 0 (8-bit) to arbitrary Quantum N (8×(N+1) bits).
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@quantum_option
@click.option('--abort', is_flag=True, help='Stop at the first failing law.')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON.')
def verify(quantum: int, abort: bool, as_json: bool):
    """Check the ring laws at a quantum level."""
    ring = _ring(quantum)

    if abort:
        try:
            result = verify_coherence(ring, VerificationMode.ABORT)
        except CoherenceViolation as e:
            click.echo(f"  ✗ Coherence failed: {e}", err=True)
            raise SystemExit(1)
    else:
        result = ring.verify()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(f"Quantum:            {ring.quantum}")
        click.echo(f"Width:              {ring.width} byte(s)")
        click.echo(f"Bits:               {ring.bits}")
        click.echo(f"Cycle:              {ring.cycle:,}" if ring.cycle <= 2**32 else f"Cycle:              2^{ring.bits}")
        click.echo(f"Checks:             {result.total_checks:,}"
                   + (" (sampled)" if result.sampled else " (exhaustive)"))
        click.echo(f"Full cycle:         {'verified' if result.full_cycle_verified else 'not walked'}")
        for failure in result.failures:
            click.echo(f"  ✗ {failure}", err=True)
        if result.verified:
            click.echo("  ✓ All coherence checks passed")
            click.echo("  ✓ Critical identity verified: neg(bnot(x)) = succ(x)")

    if not result.verified:
        raise SystemExit(1)


@main.command(name="derive")
@quantum_option
@click.argument('term_json')
@click.option('--certify', is_flag=True, help='Also issue a certificate.')
@click.option('--receipt', 'module_id', default=None, help='Also issue a receipt for this module id.')
def derive_command(quantum: int, term_json: str, certify: bool, module_id: Optional[str]):
    """
    Derive TERM_JSON, e.g. '{"@type": "TermNode", "operation": "xor", "operands": [85, 170]}'.
    """
    try:
        term = term_from_structure(json.loads(term_json))
    except (ValueError, UORError) as e:
        raise click.BadParameter(str(e), param_hint="TERM_JSON")

    ring = _verified_ring(quantum)
    try:
        if module_id is not None:
            derivation, receipt = generate_receipt(module_id, ring, term)
        else:
            derivation, receipt = derive(ring, term), None
    except UORError as e:
        raise click.ClickException(str(e))

    output: Dict[str, Any] = {"derivation": derivation.to_jsonld()}
    if certify:
        output["certificate"] = issue_certificate(derivation, ring, term).to_jsonld()
    if receipt is not None:
        output["receipt"] = receipt.to_jsonld()
    click.echo(json.dumps(output, indent=2, ensure_ascii=False))


@main.command()
@quantum_option
def demo(quantum: int):
    """Show that equivalent terms share one derivation id."""
    ring = _verified_ring(quantum)

    click.echo("Canonicalization demo:")
    t1 = make_term("xor", 0x55, 0, 0xAA)      # with zero
    t2 = make_term("xor", 0x55, 0xAA)          # without zero
    t3 = make_term("xor", 0xAA, 0x55)          # different order
    t4 = make_term("xor", 0x55, 0x55, 0xAA)    # with self-cancellation

    d1, d2, d3, d4 = derive(ring, t1), derive(ring, t2), derive(ring, t3), derive(ring, t4)

    click.echo(f"  t1 = xor(0x55, 0, 0xAA)      → {d1.canonical_term}")
    click.echo(f"  t2 = xor(0x55, 0xAA)         → {d2.canonical_term}")
    click.echo(f"  t3 = xor(0xAA, 0x55)         → {d3.canonical_term}")
    click.echo(f"  t4 = xor(0x55, 0x55, 0xAA)   → {d4.canonical_term}")
    click.echo()
    click.echo(f"  IDs equal (t1==t2==t3): {d1.derivation_id == d2.derivation_id == d3.derivation_id}")
    click.echo(f"  t4 different (0x55 xor 0x55 = 0): {d4.derivation_id != d1.derivation_id}")
    click.echo(f"  t4 result: {glyph(ring.to_bytes(d4.result_value))}")

    click.echo()
    click.echo("Idempotence demo:")
    for term in (make_term("and", 0x55, 0x55, "x"), make_term("or", 0xAA, 0xAA, 0x00)):
        try:
            d = derive(ring, term)
        except UORError as e:
            click.echo(f"  {term} → {e}")
            continue
        click.echo(f"  {term} → {d.canonical_term} = {glyph(ring.to_bytes(d.result_value))}")

    click.echo()
    click.echo("Critical identity:")
    x_bytes = ring.to_bytes(0x55)
    click.echo("  x = 0x55")
    click.echo(f"  neg(bnot(x)) = {ring.neg(ring.bnot(x_bytes))}")
    click.echo(f"  succ(x)      = {ring.succ(x_bytes)}")
    click.echo(f"  Equal:       {ring.neg(ring.bnot(x_bytes)) == ring.succ(x_bytes)}")


def cli():
    main(auto_envvar_prefix="UOR")


if __name__ == "__main__":
    cli()
