"""
Tests for the term canonicalizer.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from uor_prism.canonical import (
    MAX_ITERATIONS,
    canonical_serialize,
    canonicalize,
    commutative_sorting,
    rewrite,
)
from uor_prism.derivation import evaluate
from uor_prism.ring import Ring, RingConfig
from uor_prism.term import NARY_OPS, UNARY_OPS, Const, Nary, Unary, Var, make_term

Q0 = RingConfig.for_quantum(0)
Q1 = RingConfig.for_quantum(1)


def canon(op, *operands, config=Q0):
    return canonicalize(make_term(op, *operands), config)


class TestRules:

    def test_involution_cancellation(self):
        assert canon("neg", make_term("neg", "x")) == Var("x")
        assert canon("bnot", make_term("bnot", make_term("bnot", "x"))) == Unary("bnot", Var("x"))

    def test_derived_expansion(self):
        assert canon("succ", "x") == Unary("neg", Unary("bnot", Var("x")))
        assert canon("pred", "x") == Unary("bnot", Unary("neg", Var("x")))

    def test_expansion_then_cancellation(self):
        assert canon("neg", make_term("succ", "x")) == Unary("bnot", Var("x"))
        assert canon("pred", make_term("succ", "x")) == Var("x")

    def test_constant_reduction(self):
        assert canonicalize(Const(300), Q0) == Const(44)
        assert canonicalize(Const(-1), Q0) == Const(255)
        assert canonicalize(Const(-1), Q1) == Const(0xFFFF)

    def test_constant_folding(self):
        assert canon("xor", 0x55, 0xAA) == Const(0xFF)
        assert canon("neg", 42) == Const(214)
        assert canon("succ", 42) == Const(43)
        assert canon("neg", make_term("bnot", 42)) == Const(43)
        assert canon("pred", 0) == Const(255)

    def test_commutative_sorting_rule(self):
        t = Nary("xor", (Const(170), Const(85)))
        assert commutative_sorting(t, Q0).operands == (Const(85), Const(170))

    def test_constants_sort_first(self):
        assert canon("xor", "x", 0x10) == Nary("xor", (Const(0x10), Var("x")))

    def test_associative_flattening(self):
        t = make_term("xor", "a", make_term("xor", "b", "c"))
        assert canonicalize(t, Q0) == Nary("xor", (Var("a"), Var("b"), Var("c")))

    def test_identity_elimination(self):
        assert canon("xor", "x", 0) == Var("x")
        assert canon("or", "x", 0) == Var("x")
        assert canon("and", "x", 0xFF) == Var("x")
        assert canon("and", "x", 0xFFFF, config=Q1) == Var("x")

    def test_and_identity_is_width_mask(self):
        assert canon("and", "x", 0xFF, config=Q1) == Nary("and", (Const(0xFF), Var("x")))

    def test_annihilators(self):
        assert canon("and", "x", 0) == Const(0)
        assert canon("or", "x", 0xFF) == Const(0xFF)

    def test_empty_lists_become_identity(self):
        assert canon("xor") == Const(0)
        assert canon("or") == Const(0)
        assert canon("and") == Const(0xFF)
        assert canon("and", config=Q1) == Const(0xFFFF)

    def test_singleton_collapses(self):
        assert canon("or", make_term("neg", "x")) == Unary("neg", Var("x"))

    def test_self_cancellation(self):
        assert canon("xor", "x", "x") == Const(0)
        assert canon("xor", "a", make_term("xor", "a", "b")) == Var("b")
        assert canon("xor", "x", "x", "x") == Var("x")

    def test_idempotence_rule(self):
        assert canon("and", "x", "x") == Var("x")
        assert canon("or", "x", "y", "x") == Nary("or", (Var("x"), Var("y")))

    def test_no_succ_or_pred_in_canonical_form(self):
        text = canonical_serialize(make_term("xor", make_term("succ", "a"), make_term("pred", "b")), Q0)
        assert "succ" not in text and "pred" not in text


class TestCanonicalText:

    def test_width_dependent(self):
        t = make_term("xor", "x", 0x10)
        assert canonical_serialize(t, Q0) == "xor(0x10,?x)"
        assert canonical_serialize(t, Q1) == "xor(0x0010,?x)"

    def test_commutative_text_equal(self):
        a = make_term("xor", make_term("neg", "a"), "b")
        b = make_term("xor", "b", make_term("neg", "a"))
        assert canonical_serialize(a, Q0) == canonical_serialize(b, Q0)


class TestFixedPoint:

    def test_canonical_input_takes_one_pass(self):
        canonical = canon("xor", "x", 0x10)
        _, passes = rewrite(canonical, Q0)
        assert passes == 1

    def test_reduction_takes_more_than_one(self):
        _, passes = rewrite(Const(300), Q0)
        assert passes == 2

    def test_cap(self):
        assert MAX_ITERATIONS == 100


# ═══════════════════════════════════════════════════════════════════════════════
# Generated terms
# ═══════════════════════════════════════════════════════════════════════════════

constants = st.integers(min_value=-600, max_value=600).map(Const)
variables = st.sampled_from(["a", "b", "c"]).map(Var)


def _compound(children):
    return st.one_of(
        st.builds(Unary, st.sampled_from(sorted(UNARY_OPS)), children),
        st.builds(Nary, st.sampled_from(sorted(NARY_OPS)),
                  st.lists(children, max_size=4).map(tuple)),
    )


terms = st.recursive(constants | variables, _compound, max_leaves=12)
ground_terms = st.recursive(constants, _compound, max_leaves=12)


class TestProperties:

    @settings(max_examples=300, deadline=None)
    @given(terms)
    def test_idempotent(self, t):
        once = canonicalize(t, Q0)
        assert canonicalize(once, Q0) == once

    @settings(max_examples=300, deadline=None)
    @given(terms)
    def test_fixed_point_well_under_cap(self, t):
        _, passes = rewrite(t, Q0)
        assert passes < 20

    @settings(max_examples=200, deadline=None)
    @given(st.sampled_from(sorted(NARY_OPS)), terms, terms)
    def test_commutative(self, op, a, b):
        assert canonicalize(Nary(op, (a, b)), Q0) == canonicalize(Nary(op, (b, a)), Q0)

    @settings(max_examples=200, deadline=None)
    @given(terms)
    def test_self_cancellation(self, t):
        assert canonicalize(Nary("xor", (t, t)), Q0) == Const(0)

    @settings(max_examples=300, deadline=None)
    @given(ground_terms)
    def test_preserves_value(self, t):
        ring = Ring(0)
        assert evaluate(canonicalize(t, Q0), ring) == evaluate(t, ring)

    @settings(max_examples=100, deadline=None)
    @given(ground_terms)
    def test_ground_terms_fold_to_constant(self, t):
        assert isinstance(canonicalize(t, Q1), Const)
