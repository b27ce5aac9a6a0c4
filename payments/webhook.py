"""
monobank Webhook Signature Verification

Webhooks carry an X-Sign header: base64 of a detached signature over the
raw request body. The public key comes from GET /api/merchant/pubkey as
base64 of PEM key material.

- EC keys: ECDSA with SHA-256 (what monobank issues)
- RSA keys: PKCS#1 v1.5 with SHA-256
- Signature mismatch → False
- Signature not decodable as base64 → False (untrusted input)
- Public key missing → MonoVerificationError
- Public key undecodable or of unsupported type → MonoPublicKeyError
  (configuration fault, surfaced to the caller)

The aiohttp helpers at the bottom read inbound requests and wire the
verifier into a web.Application route.
"""
import asyncio
import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from aiohttp import web
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from app.core.structured_logger import log_event
from payments.exceptions import (
    MonoAcquiringError,
    MonoDecodeError,
    MonoPublicKeyError,
    MonoVerificationError,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Sign"

PublicKey = Union[ec.EllipticCurvePublicKey, rsa.RSAPublicKey]


@dataclass(frozen=True)
class InboundWebhook:
    """Raw webhook as received: body bytes and request headers"""
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def signature(self) -> Optional[str]:
        """X-Sign header value (header names are case-insensitive)"""
        wanted = SIGNATURE_HEADER.lower()
        for name, value in self.headers.items():
            if name.lower() == wanted:
                return value
        return None

    def json(self) -> Dict[str, Any]:
        """Decoded body; call only after the signature has been verified"""
        try:
            data = json.loads(self.body)
        except ValueError as e:
            raise MonoDecodeError(f"Can not decode webhook body: {self.body[:200]!r}") from e
        if not isinstance(data, dict):
            raise MonoDecodeError(f"Webhook body is not a JSON object: {self.body[:200]!r}")
        return data


def load_public_key(public_key_base64: str) -> PublicKey:
    """
    Load the key returned by GET /api/merchant/pubkey

    Args:
        public_key_base64: base64 of PEM (or DER) public key

    Raises:
        MonoPublicKeyError: Key is not base64, not a key, or not EC/RSA
    """
    try:
        key_bytes = base64.b64decode(public_key_base64)
    except (binascii.Error, ValueError, TypeError) as e:
        raise MonoPublicKeyError("Public key is not valid base64") from e

    try:
        if key_bytes.lstrip().startswith(b"-----BEGIN"):
            public_key = serialization.load_pem_public_key(key_bytes)
        else:
            public_key = serialization.load_der_public_key(key_bytes)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise MonoPublicKeyError(f"Public key can not be loaded: {e}") from e

    if not isinstance(public_key, (ec.EllipticCurvePublicKey, rsa.RSAPublicKey)):
        raise MonoPublicKeyError(f"Unsupported public key type: {type(public_key).__name__}")
    return public_key


def verify_signature(
    payload: Optional[Union[bytes, str]],
    public_key_base64: Optional[str],
    signature_base64: Optional[str],
) -> bool:
    """
    Verify a detached SHA-256 signature over the raw webhook body

    Args:
        payload: Raw request body (str is encoded as UTF-8)
        public_key_base64: Public key from GET /api/merchant/pubkey
        signature_base64: X-Sign header value

    Returns:
        True if the signature matches, False otherwise

    Raises:
        MonoVerificationError: Public key, signature or payload is missing
        MonoPublicKeyError: The public key can not be loaded
    """
    if not public_key_base64:
        raise MonoVerificationError("Public key is empty")
    if not signature_base64:
        raise MonoVerificationError("X-Sign header value is empty")
    if payload is None:
        raise MonoVerificationError("Webhook body is missing")

    data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    public_key = load_public_key(public_key_base64)

    try:
        signature = base64.b64decode(signature_base64)
    except (binascii.Error, ValueError):
        log_event(logger, component="webhook", operation="verify", outcome="rejected",
                  reason="signature_not_base64", level="warning")
        return False

    try:
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            public_key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
        else:
            public_key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        log_event(logger, component="webhook", operation="verify", outcome="rejected",
                  reason="signature_mismatch", level="warning")
        return False

    log_event(logger, component="webhook", operation="verify", outcome="success")
    return True


# ====================================================================================
# aiohttp integration
# ====================================================================================

async def read_inbound_webhook(request: web.Request) -> InboundWebhook:
    """Read raw body and headers of an aiohttp request"""
    body = await request.read()
    return InboundWebhook(body=body, headers=request.headers)


def create_webhook_handler(
    client,
    on_event: Callable[[Dict[str, Any]], Awaitable[None]],
    public_key_base64: Optional[str] = None,
) -> Callable[[web.Request], Awaitable[web.Response]]:
    """
    Build an aiohttp handler for monobank invoice webhooks

    Args:
        client: MonoAcquiring instance (fetches the public key when not given)
        on_event: Coroutine called with the decoded body of a verified webhook
        public_key_base64: Cached public key; fetched on every call when None

    Responses:
        200 {"status": "ok"}            verified and handled
        200 {"status": "unauthorized"}  signature or key missing, or signature wrong
        200 {"status": "invalid"}       verified body is not a JSON object
        503 {"status": "unavailable"}   public key could not be fetched or loaded,
                                        monobank redelivers the webhook
    """

    async def handle_webhook(request: web.Request) -> web.Response:
        inbound = await read_inbound_webhook(request)

        try:
            # Blocking HTTP + crypto, keep it off the event loop
            verified = await asyncio.to_thread(
                client.verify_webhook,
                None,
                public_key_base64,
                None,
                inbound,
            )
        except MonoPublicKeyError as e:
            logger.error(f"MONO_WEBHOOK_PUBKEY_INVALID [reason={e.message[:200]}]")
            return web.json_response({"status": "unavailable"}, status=503)
        except MonoVerificationError as e:
            logger.warning(f"MONO_WEBHOOK_UNVERIFIABLE [reason={e.message}]")
            return web.json_response({"status": "unauthorized"}, status=200)
        except MonoAcquiringError as e:
            logger.error(f"MONO_WEBHOOK_PUBKEY_UNAVAILABLE [status={e.status_code}, error={e.message[:200]}]")
            return web.json_response({"status": "unavailable"}, status=503)

        if not verified:
            logger.warning("MONO_WEBHOOK_SIGNATURE_INVALID")
            return web.json_response({"status": "unauthorized"}, status=200)

        try:
            event = inbound.json()
        except MonoDecodeError as e:
            logger.error(f"MONO_WEBHOOK_INVALID_BODY [error={e.message[:200]}]")
            return web.json_response({"status": "invalid"}, status=200)

        logger.info(
            f"MONO_WEBHOOK_ACCEPTED [invoice_id={event.get('invoiceId')}, status={event.get('status')}]"
        )
        await on_event(event)
        return web.json_response({"status": "ok"}, status=200)

    return handle_webhook
