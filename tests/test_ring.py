"""
Tests for ring arithmetic over byte tuples.
"""

import pytest

from uor_prism.errors import InvalidRingWidth, ValidationError
from uor_prism.ring import Q, Q0, Q1, Ring, RingConfig, from_bytes, to_bytes


class TestRingConfig:

    def test_quantum_zero(self):
        config = RingConfig.for_quantum(0)
        assert (config.width, config.bits, config.cycle, config.mask) == (1, 8, 256, 255)

    def test_quantum_one(self):
        config = RingConfig.for_quantum(1)
        assert (config.width, config.bits, config.cycle, config.mask) == (2, 16, 65536, 65535)

    @pytest.mark.parametrize("quantum", [-1, 1.5, "0", True, None])
    def test_rejects_invalid_quantum(self, quantum):
        with pytest.raises(InvalidRingWidth):
            Ring(quantum)

    def test_factories(self):
        assert Q0().bits == 8
        assert Q1().bits == 16
        assert Q(3).cycle == 2 ** 32

    def test_from_config(self):
        ring = Ring.from_config(RingConfig.for_quantum(2))
        assert ring.quantum == 2
        assert ring.config == RingConfig.for_quantum(2)


class TestConversion:

    def test_round_trip_all_q0(self):
        for n in range(256):
            assert from_bytes(to_bytes(n, 8)) == n

    def test_big_endian(self):
        assert to_bytes(0x1234, 16) == (0x12, 0x34)
        assert from_bytes((0x12, 0x34)) == 0x1234

    def test_out_of_range_is_reduced(self):
        assert to_bytes(300, 8) == (44,)
        assert to_bytes(-1, 16) == (0xFF, 0xFF)

    def test_bad_bit_width(self):
        with pytest.raises(InvalidRingWidth):
            to_bytes(1, 12)

    def test_validates_tuples(self, q0):
        with pytest.raises(ValidationError):
            q0.neg((1, 2))
        with pytest.raises(ValidationError):
            q0.bnot((256,))


class TestInvolutions:

    def test_neg_involution(self, q0):
        for x in range(256):
            assert q0.neg(q0.neg(x)) == (x,)

    def test_bnot_involution(self, q0):
        for x in range(256):
            assert q0.bnot(q0.bnot(x)) == (x,)

    def test_neg_values(self, q0):
        assert q0.neg(0) == (0,)
        assert q0.neg(1) == (255,)
        assert q0.neg(42) == (214,)

    def test_bnot_per_byte(self, q1):
        assert q1.bnot((0x0F, 0xF0)) == (0xF0, 0x0F)


class TestDerivedOperations:

    def test_critical_identity(self, q0):
        for x in range(256):
            assert q0.neg(q0.bnot(x)) == q0.succ(x)

    def test_succ_pred_inverse(self, q0):
        for x in range(256):
            assert q0.succ(q0.pred(x)) == (x,)
            assert q0.pred(q0.succ(x)) == (x,)

    def test_succ_of_42(self, q0):
        assert q0.succ(42) == (43,)
        assert q0.neg(q0.bnot(42)) == (43,)

    def test_succ_pred_200(self, q0):
        assert q0.succ(q0.pred(200)) == (200,)

    def test_full_cycle(self, q0):
        current = q0.to_bytes(0)
        seen = set()
        for _ in range(256):
            seen.add(current)
            current = q0.succ(current)
        assert current == (0,)
        assert len(seen) == 256

    def test_carry_and_borrow(self, q1):
        assert q1.succ((0x00, 0xFF)) == (0x01, 0x00)
        assert q1.pred((0x01, 0x00)) == (0x00, 0xFF)
        assert q1.succ((0xFF, 0xFF)) == (0x00, 0x00)

    def test_succ_uses_composition(self, q0):
        calls = []

        class TracingRing(Ring):
            def neg(self, n):
                calls.append("neg")
                return super().neg(n)

            def bnot(self, n):
                calls.append("bnot")
                return super().bnot(n)

        TracingRing(0).succ(5)
        assert calls == ["bnot", "neg"]


class TestBinaryOperations:

    def test_bitwise(self, q0):
        assert q0.xor(0x55, 0xAA) == (0xFF,)
        assert q0.band(0xF0, 0x3C) == (0x30,)
        assert q0.bor(0xF0, 0x0F) == (0xFF,)

    def test_modular_arithmetic(self, q0):
        assert q0.add(200, 100) == (44,)
        assert q0.sub(5, 10) == (251,)
        assert q0.mul(3, 7) == (21,)
        assert q0.mul(16, 16) == (0,)

    def test_wide_arithmetic(self, q1):
        assert q1.add(0xFFFF, 2) == (0x00, 0x01)
        assert q1.xor((0x12, 0x34), (0x00, 0xFF)) == (0x12, 0xCB)


class TestDiagnostics:

    def test_stratum(self, q0, q1):
        assert q0.stratum(0) == 0
        assert q0.stratum(0xFF) == 8
        assert q1.stratum((0x01, 0x01)) == 2

    def test_spectrum(self, q0):
        assert q0.spectrum(0b101) == ((0, 2),)


class TestVerifiedFlag:

    def test_starts_unverified(self, q0):
        assert q0.verified is False

    def test_verify_sets_flag(self, q0):
        result = q0.verify()
        assert result.verified
        assert q0.verified is True

    def test_repeat_verify_keeps_flag(self, q0):
        q0.verify()
        q0.verify()
        assert q0.verified is True

    def test_failed_verify_leaves_flag_down(self, broken_ring):
        result = broken_ring.verify()
        assert not result.verified
        assert broken_ring.verified is False
