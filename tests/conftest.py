"""
Pytest configuration and shared fixtures for the acquiring client tests.
"""
import base64
import json
import pytest
from typing import Any, Callable, Dict, List, Optional

import httpx
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from payments.monobank import MonoAcquiring


TEST_TOKEN = "test-token-123"


def _public_key_base64(private_key) -> str:
    pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(pem).decode()


@pytest.fixture(scope="session")
def ec_private_key():
    """EC P-256 key, the kind monobank issues"""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_public_key_base64(ec_private_key):
    """Public key in the GET /api/merchant/pubkey format (base64 of PEM)"""
    return _public_key_base64(ec_private_key)


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key_base64(rsa_private_key):
    return _public_key_base64(rsa_private_key)


@pytest.fixture
def webhook_body() -> bytes:
    """Invoice status webhook body"""
    return json.dumps({
        "invoiceId": "p2_9ZgpZVsl3",
        "status": "success",
        "amount": 4200,
        "ccy": 980,
        "reference": "84d0070ee4e44667b31371d8f8813947",
    }).encode()


@pytest.fixture
def ec_sign(ec_private_key) -> Callable[[bytes], str]:
    """Sign bytes the way monobank fills X-Sign"""
    def _sign(payload: bytes) -> str:
        signature = ec_private_key.sign(payload, ec.ECDSA(hashes.SHA256()))
        return base64.b64encode(signature).decode()
    return _sign


@pytest.fixture
def rsa_sign(rsa_private_key) -> Callable[[bytes], str]:
    def _sign(payload: bytes) -> str:
        signature = rsa_private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())
        return base64.b64encode(signature).decode()
    return _sign


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served"""

    def __init__(self, status_code: int = 200, body: Any = None, raw: Optional[str] = None,
                 handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if handler is not None:
                return handler(request)
            if raw is not None:
                return httpx.Response(status_code, content=raw.encode())
            return httpx.Response(status_code, json=body if body is not None else {})

        super().__init__(_handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def make_client():
    """
    Build (client, transport) pairs:
        client, transport = make_client(200, {"merchantId": "x"})
        client, transport = make_client(500, raw="<html>")
    """
    def _make(status_code: int = 200, body: Any = None, raw: Optional[str] = None,
              handler=None, token: Optional[str] = TEST_TOKEN):
        transport = RecordingTransport(status_code, body, raw, handler)
        client = MonoAcquiring(token=token, transport=transport)
        return client, transport
    return _make
