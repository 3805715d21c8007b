"""
Unit tests for asymmetric (v1a) webhook signatures.

Tests Ed25519 key generation, signing and verification, and coexistence
with v1 tokens in the same signature header.
"""

import base64
import time
import unittest

import pytest

from standard_webhooks.asymmetric import (
    PRIVATE_KEY_PREFIX,
    PUBLIC_KEY_PREFIX,
    AsymmetricWebhook,
    generate_key_pair,
)
from standard_webhooks.config import SVIX
from standard_webhooks.errors import ErrorKind, InvalidKeyError
from standard_webhooks.webhook import StandardWebhook

MSG_ID = "msg_p5jXN8AQM9LWM0D4loKWxJek"
PAYLOAD = '{"test": 2432232314}'
HMAC_SECRET = "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"


class TestKeyGeneration(unittest.TestCase):
    """Test Ed25519 key pair generation."""

    def test_generate_key_pair(self):
        private_key, public_key = generate_key_pair()

        self.assertTrue(private_key.startswith(PRIVATE_KEY_PREFIX))
        self.assertTrue(public_key.startswith(PUBLIC_KEY_PREFIX))
        self.assertEqual(len(base64.b64decode(private_key[len(PRIVATE_KEY_PREFIX):])), 32)
        self.assertEqual(len(base64.b64decode(public_key[len(PUBLIC_KEY_PREFIX):])), 32)

    def test_key_pairs_differ(self):
        self.assertNotEqual(generate_key_pair(), generate_key_pair())


class TestAsymmetricSigning(unittest.TestCase):
    """Test v1a signature generation and verification."""

    def setUp(self):
        """Generate test key pair."""
        self.private_key, self.public_key = generate_key_pair()
        self.signer = AsymmetricWebhook(private_key=self.private_key)
        self.verifier = AsymmetricWebhook(public_key=self.public_key)
        self.timestamp = int(time.time())

    def make_headers(self, signature):
        return {
            "webhook-id": MSG_ID,
            "webhook-signature": signature,
            "webhook-timestamp": str(self.timestamp),
        }

    def test_sign_format(self):
        signature = self.signer.sign(MSG_ID, self.timestamp, PAYLOAD)

        version, encoded = signature.split(",", 1)
        self.assertEqual(version, "v1a")
        # Ed25519 signatures are 64 bytes
        self.assertEqual(len(base64.b64decode(encoded)), 64)

    def test_sign_is_deterministic(self):
        self.assertEqual(
            self.signer.sign(MSG_ID, self.timestamp, PAYLOAD),
            self.signer.sign(MSG_ID, self.timestamp, PAYLOAD),
        )

    def test_sign_and_verify(self):
        headers = self.signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)

        self.assertTrue(self.verifier.verify(PAYLOAD, headers))

    def test_signer_can_verify(self):
        """Test that the public key is derived from the private key."""
        headers = self.signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)

        self.assertTrue(self.signer.verify(PAYLOAD, headers))

    def test_verify_tampered_payload_fails(self):
        headers = self.signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)

        result = self.verifier.verify('{"tampered": "data"}', headers)
        self.assertEqual(result.kind, ErrorKind.NO_MATCHING_SIGNATURE)

    def test_verify_wrong_key_fails(self):
        _, wrong_public_key = generate_key_pair()
        headers = self.signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)

        result = AsymmetricWebhook(public_key=wrong_public_key).verify(PAYLOAD, headers)
        self.assertEqual(result.kind, ErrorKind.NO_MATCHING_SIGNATURE)

    def test_undecodable_candidate_does_not_match(self):
        result = self.verifier.verify(PAYLOAD, self.make_headers("v1a,!!not-base64!!"))

        self.assertEqual(result.kind, ErrorKind.NO_MATCHING_SIGNATURE)

    def test_verify_only_instance_cannot_sign(self):
        self.assertFalse(self.verifier.can_sign)
        self.assertTrue(self.signer.can_sign)

        with pytest.raises(ValueError):
            self.verifier.sign(MSG_ID, self.timestamp, PAYLOAD)

    def test_missing_header(self):
        headers = self.signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)
        del headers["webhook-timestamp"]

        result = self.verifier.verify(PAYLOAD, headers)
        self.assertEqual(result.kind, ErrorKind.MISSING_HEADER)

    def test_svix_headers(self):
        signer = AsymmetricWebhook(private_key=self.private_key, options=SVIX)
        verifier = AsymmetricWebhook(public_key=self.public_key, options=SVIX)

        headers = signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)

        self.assertIn("Svix-Signature", headers)
        self.assertTrue(verifier.verify(PAYLOAD, headers))

    def test_raw_key_bytes(self):
        private_bytes = base64.b64decode(self.private_key[len(PRIVATE_KEY_PREFIX):])
        public_bytes = base64.b64decode(self.public_key[len(PUBLIC_KEY_PREFIX):])

        signer = AsymmetricWebhook(private_key=private_bytes)
        verifier = AsymmetricWebhook(public_key=public_bytes)

        headers = signer.make_headers(MSG_ID, self.timestamp, PAYLOAD)
        self.assertTrue(verifier.verify(PAYLOAD, headers))

    def test_expanded_private_key(self):
        """Test that a 64-byte seed + public key private key is accepted."""
        seed = base64.b64decode(self.private_key[len(PRIVATE_KEY_PREFIX):])
        public = base64.b64decode(self.public_key[len(PUBLIC_KEY_PREFIX):])
        expanded = PRIVATE_KEY_PREFIX + base64.b64encode(seed + public).decode("ascii")

        signer = AsymmetricWebhook(private_key=expanded)
        self.assertEqual(
            signer.sign(MSG_ID, self.timestamp, PAYLOAD),
            self.signer.sign(MSG_ID, self.timestamp, PAYLOAD),
        )


class TestMixedSignatures(unittest.TestCase):
    """Test v1 and v1a tokens sharing one signature header."""

    def setUp(self):
        self.private_key, self.public_key = generate_key_pair()
        self.hmac_webhook = StandardWebhook(HMAC_SECRET)
        self.asymmetric_webhook = AsymmetricWebhook(private_key=self.private_key)

        timestamp = int(time.time())
        v1 = self.hmac_webhook.sign(MSG_ID, timestamp, PAYLOAD)
        v1a = self.asymmetric_webhook.sign(MSG_ID, timestamp, PAYLOAD)
        self.headers = {
            "webhook-id": MSG_ID,
            "webhook-signature": f"{v1a} {v1}",
            "webhook-timestamp": str(timestamp),
        }

    def test_hmac_verifier_skips_v1a(self):
        self.assertTrue(self.hmac_webhook.verify(PAYLOAD, self.headers))

    def test_asymmetric_verifier_skips_v1(self):
        verifier = AsymmetricWebhook(public_key=self.public_key)

        self.assertTrue(verifier.verify(PAYLOAD, self.headers))

    def test_v1_only_header_has_no_v1a_match(self):
        self.headers["webhook-signature"] = self.headers["webhook-signature"].split(" ")[1]
        verifier = AsymmetricWebhook(public_key=self.public_key)

        result = verifier.verify(PAYLOAD, self.headers)
        self.assertEqual(result.kind, ErrorKind.NO_MATCHING_SIGNATURE)


class TestInvalidKeys(unittest.TestCase):
    """Test rejection of unusable keys."""

    def test_no_keys(self):
        with pytest.raises(ValueError):
            AsymmetricWebhook()

    def test_invalid_base64(self):
        with pytest.raises(InvalidKeyError):
            AsymmetricWebhook(public_key="whpk_not base64")

    def test_wrong_length_public_key(self):
        short_key = PUBLIC_KEY_PREFIX + base64.b64encode(b"short").decode("ascii")

        with pytest.raises(InvalidKeyError):
            AsymmetricWebhook(public_key=short_key)

    def test_wrong_length_private_key(self):
        with pytest.raises(InvalidKeyError):
            AsymmetricWebhook(private_key=b"x" * 31)

    def test_mismatched_key_pair(self):
        private_key, _ = generate_key_pair()
        _, other_public_key = generate_key_pair()

        with pytest.raises(InvalidKeyError):
            AsymmetricWebhook(private_key=private_key, public_key=other_public_key)

    def test_matching_key_pair(self):
        private_key, public_key = generate_key_pair()
        wh = AsymmetricWebhook(private_key=private_key, public_key=public_key)

        headers = wh.make_headers(MSG_ID, int(time.time()), PAYLOAD)
        self.assertTrue(wh.verify(PAYLOAD, headers))


if __name__ == "__main__":
    unittest.main()
