"""Tests for seeds, the FNV-1a hash and the seeded random stream."""

import re

import pytest

from planets.errors import AppError, ErrorType
from planets.services import random_source
from planets.services.random_source import (
    fnv1a_64,
    generate_run_name,
    generate_seed,
    resolve_seed,
    seeded_random,
    validate_seed,
)


class TestFnv1a64:
    def test_empty_string_is_offset_basis(self):
        assert fnv1a_64("") == 0xCBF29CE484222325

    def test_known_vectors(self):
        assert fnv1a_64("a") == 0xAF63DC4C8601EC8C
        assert fnv1a_64("foobar") == 0x85944171F73967E8

    def test_result_is_unsigned_64_bit(self):
        for text in ("feedface", "abc", "x" * 32, "ünïcødé"):
            h = fnv1a_64(text)
            assert 0 <= h < 2**64

    def test_different_seeds_hash_differently(self):
        assert fnv1a_64("abc") != fnv1a_64("abd")


class TestSeeds:
    def test_generated_seed_is_16_hex_chars(self):
        seed = generate_seed()
        assert re.fullmatch(r"[0-9a-f]{16}", seed)

    def test_generated_seeds_differ(self):
        assert generate_seed() != generate_seed()

    def test_run_name_is_8_hex_chars(self):
        assert re.fullmatch(r"[0-9a-f]{8}", generate_run_name())

    def test_validate_accepts_bounds(self):
        validate_seed("abc")
        validate_seed("x" * 32)

    @pytest.mark.parametrize("seed", ["xy", "x" * 33])
    def test_validate_rejects_out_of_bounds(self, seed):
        with pytest.raises(AppError) as exc_info:
            validate_seed(seed)
        assert exc_info.value.type == ErrorType.validation

    def test_length_is_counted_in_utf8_bytes(self):
        validate_seed("é" * 16)  # 32 bytes
        validate_seed("éa")  # 3 bytes
        for seed in ("é" * 17, "é"):
            with pytest.raises(AppError) as exc_info:
                validate_seed(seed)
            assert exc_info.value.type == ErrorType.validation

    def test_resolve_generates_when_missing(self):
        assert len(resolve_seed(None)) == 16
        assert len(resolve_seed("")) == 16

    def test_resolve_keeps_supplied_seed(self):
        assert resolve_seed("feedface") == "feedface"

    def test_os_random_failure_is_internal(self, monkeypatch):
        def broken(n):
            raise OSError("no entropy")

        monkeypatch.setattr(random_source.secrets, "token_bytes", broken)
        with pytest.raises(AppError) as exc_info:
            generate_seed()
        assert exc_info.value.type == ErrorType.internal
        assert isinstance(exc_info.value.__cause__, OSError)


class TestSeededRandom:
    def test_same_seed_same_stream(self):
        a = seeded_random("feedface")
        b = seeded_random("feedface")
        assert [a.randrange(1000) for _ in range(20)] == [b.randrange(1000) for _ in range(20)]

    def test_different_seed_different_stream(self):
        a = seeded_random("feedface")
        b = seeded_random("deadbeef")
        assert [a.randrange(10**9) for _ in range(5)] != [b.randrange(10**9) for _ in range(5)]
