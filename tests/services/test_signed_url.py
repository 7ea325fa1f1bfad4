"""Tests for HMAC-SHA512 signed URL generation and verification."""
import base64
import hashlib
import hmac
from datetime import timedelta
from pathlib import Path
from urllib.parse import parse_qsl, urlsplit

import pytest

from signed_storage.services.signed_url import (
    ExpiredLinkError,
    HMACSignedURLBuilder,
    MalformedSignedURLError,
    SignatureMismatchError,
    SignedURLVerifier,
    canonical_request_uri,
    compute_signature,
)
from tests.constants import NOW, SECRET, SIGNED_BASE_URL, FakeClock

KEY = "user-files/sample.txt"


def _split(url: str) -> tuple[str, list[tuple[str, str]]]:
    parts = urlsplit(url)
    return parts.path, parse_qsl(parts.query, keep_blank_values=True)


def _build(builder, ttl_seconds: int = 60, key: str = KEY) -> str:
    return builder.build(Path("/unused") / key, key, timedelta(seconds=ttl_seconds))


class TestComputeSignature:
    def test_matches_reference_construction(self):
        """Message is compact sorted JSON, digest is unpadded base64url SHA-512."""
        message = b'{"expireAt":"1700000060","requestURI":"/files/private/a.txt?expireAt=1700000060"}'
        expected = base64.urlsafe_b64encode(
            hmac.new(SECRET.encode(), message, hashlib.sha512).digest()
        ).rstrip(b"=").decode()

        actual = compute_signature(
            SECRET, 1700000060, "/files/private/a.txt?expireAt=1700000060"
        )

        assert actual == expected
        assert "=" not in actual

    def test_different_secret_different_signature(self):
        uri = "/files/private/a.txt?expireAt=1"
        assert compute_signature("secret-1", 1, uri) != compute_signature("secret-2", 1, uri)


class TestCanonicalRequestURI:
    def test_excludes_signature_and_sorts_params(self):
        uri = canonical_request_uri(
            "/files/private/a b.txt",
            [("signature", "abc"), ("z", "1"), ("expireAt", "5")],
        )
        assert uri == "/files/private/a%20b.txt?expireAt=5&z=1"

    def test_path_only_when_no_params(self):
        assert canonical_request_uri("/files/private/a.txt", {}) == "/files/private/a.txt"


class TestBuilder:
    def test_url_shape(self, builder):
        url = _build(builder)

        assert url.startswith(f"{SIGNED_BASE_URL}/files/private/{KEY}?")
        path, params = _split(url)
        assert dict(params)["expireAt"] == str(NOW + 60)
        assert len(dict(params)["signature"]) == 86  # 64 bytes, unpadded base64

    def test_fractional_ttl_rounds_up(self, builder):
        url = builder.build(Path("/unused"), KEY, timedelta(seconds=0.5))
        _, params = _split(url)
        assert dict(params)["expireAt"] == str(NOW + 1)

    def test_rejects_empty_secret(self):
        with pytest.raises(ValueError):
            HMACSignedURLBuilder(secret="", base_url=SIGNED_BASE_URL)


class TestVerifier:
    def test_fresh_url_verifies(self, builder, verifier):
        path, params = _split(_build(builder))

        assert verifier.verify(path, params) == NOW + 60

    def test_valid_until_expiry_then_rejected(self, builder, verifier, clock):
        """Valid at now+60, expired at now+61."""
        path, params = _split(_build(builder))

        clock.advance(60)
        verifier.verify(path, params)

        clock.advance(1)
        with pytest.raises(ExpiredLinkError):
            verifier.verify(path, params)

    def test_clock_skew_extends_acceptance(self, builder, clock):
        lenient = SignedURLVerifier(secret=SECRET, clock_skew_seconds=5, clock=clock)
        path, params = _split(_build(builder))

        clock.advance(65)
        lenient.verify(path, params)

        clock.advance(1)
        with pytest.raises(ExpiredLinkError):
            lenient.verify(path, params)

    def test_tampered_expiry_rejected(self, builder, verifier):
        """Extending expireAt breaks the signature."""
        path, params = _split(_build(builder))
        tampered = [
            (k, str(NOW + 3600) if k == "expireAt" else v) for k, v in params
        ]

        with pytest.raises(SignatureMismatchError):
            verifier.verify(path, tampered)

    def test_tampered_path_rejected(self, builder, verifier):
        path, params = _split(_build(builder))

        with pytest.raises(SignatureMismatchError):
            verifier.verify(path.replace("sample", "sampla"), params)

    def test_every_signature_character_matters(self, builder, verifier):
        path, params = _split(_build(builder))
        signature = dict(params)["signature"]

        for i in range(0, len(signature), 7):
            flipped = "A" if signature[i] != "A" else "B"
            forged = signature[:i] + flipped + signature[i + 1:]
            with pytest.raises(SignatureMismatchError):
                verifier.verify(path, [("expireAt", str(NOW + 60)), ("signature", forged)])

    def test_extra_query_parameter_rejected(self, builder, verifier):
        path, params = _split(_build(builder))

        with pytest.raises(SignatureMismatchError):
            verifier.verify(path, params + [("download", "1")])

    def test_foreign_secret_rejected(self, builder, clock):
        other = SignedURLVerifier(secret="another-secret", clock=clock)
        path, params = _split(_build(builder))

        with pytest.raises(SignatureMismatchError):
            other.verify(path, params)

    @pytest.mark.parametrize(
        "params",
        [
            [("signature", "abc")],
            [("expireAt", "soon"), ("signature", "abc")],
            [("expireAt", "-5"), ("signature", "abc")],
            [("expireAt", "1700000060")],
            [("expireAt", "1700000060"), ("signature", "")],
            [("expireAt", "1"), ("expireAt", "2"), ("signature", "abc")],
            [("expireAt", "9" * 5000), ("signature", "abc")],
            [("expireAt", "1" * 21), ("signature", "abc")],
        ],
    )
    def test_malformed_requests_rejected(self, verifier, params):
        with pytest.raises(MalformedSignedURLError):
            verifier.verify("/files/private/a.txt", params)

    def test_expiry_checked_before_signature(self, verifier):
        """An expired link is reported as expired even with a bogus signature."""
        with pytest.raises(ExpiredLinkError):
            verifier.verify(
                "/files/private/a.txt",
                [("expireAt", str(NOW - 1)), ("signature", "bogus")],
            )

    def test_rejects_negative_clock_skew(self):
        with pytest.raises(ValueError):
            SignedURLVerifier(secret=SECRET, clock_skew_seconds=-1, clock=FakeClock())
