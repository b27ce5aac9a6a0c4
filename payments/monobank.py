"""
monobank Acquiring API Integration

Thin synchronous client for https://api.monobank.ua/docs/acquiring.html

- Every call opens and closes its own httpx.Client (no pooling)
- Fixed per-call timeout, no retries: failures are raised to the caller
- Input is validated into parameter objects before any network call
- Token is sent in the X-Token header and never logged

Configuration: the token is passed explicitly. MonoAcquiring.from_config()
reads it from config.py (PROD_MONOBANK_TOKEN / STAGE_MONOBANK_TOKEN).
"""
import json
import logging
import time
from typing import Optional, Dict, Any, List

import httpx

from app.core.structured_logger import log_event, elapsed_ms
from payments.exceptions import (
    MonoAPIError,
    MonoDecodeError,
    MonoTransportError,
)
from payments.models import (
    CreateInvoiceParams,
    FinalizeParams,
    InvoiceRef,
    RefundParams,
    StatementQuery,
)
from payments.webhook import InboundWebhook, verify_signature

logger = logging.getLogger(__name__)

API_URL = "https://api.monobank.ua"
DEFAULT_TIMEOUT = 5.0

# Error bodies are echoed into exception messages; keep log lines short
_LOG_BODY_LIMIT = 200


class MonoAcquiring:
    """
    monobank acquiring client

    Args:
        token: Token from the merchant cabinet https://fop.monobank.ua/
            or a test token from https://api.monobank.ua/. When None the
            X-Token header is still sent, empty, and the API rejects the call.
        base_url: API host
        timeout: Timeout in seconds, applied by httpx to each phase of a
            call (connect, write, read, pool) rather than as one total
            ceiling: a server that keeps sending bytes can hold a call longer
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, transport: Optional[httpx.BaseTransport] = None) -> "MonoAcquiring":
        """Build a client from config.py (environment-prefixed variables)."""
        import config

        if not config.MONOBANK_ENABLED:
            logger.warning(f"MONOBANK_TOKEN_NOT_CONFIGURED [env={config.APP_ENV}]")
        return cls(
            token=config.MONOBANK_TOKEN,
            base_url=config.MONOBANK_API_URL,
            timeout=config.MONOBANK_API_TIMEOUT,
            transport=transport,
        )

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    def __repr__(self) -> str:
        masked = "set" if self._token else "missing"
        return f"MonoAcquiring(base_url={self._base_url!r}, token={masked})"

    def _get_auth_headers(self) -> Dict[str, str]:
        return {
            "X-Token": self._token or "",
            "Content-Type": "application/json",
        }

    # ================================================================================
    # Request executor
    # ================================================================================

    def request(
        self,
        path: str,
        options: Optional[Dict[str, Any]] = None,
        is_post: bool = True,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        General POST/GET request to the API using the token

        Args:
            path: Route relative to the API host, e.g. "/api/merchant/details"
            options: JSON body (POST only)
            is_post: POST when True, GET otherwise
            params: Query string parameters, URL-encoded by httpx

        Returns:
            Decoded JSON object of a 200 response

        Raises:
            MonoTransportError: Network failure, timeout or empty response
            MonoDecodeError: Body is not a JSON object
            MonoAPIError: Any non-200 status
        """
        method = "POST" if is_post else "GET"
        operation = f"{method} {path}"
        url = f"{self._base_url}{path}"
        started_at = time.monotonic()

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                if is_post:
                    response = client.post(
                        url,
                        headers=self._get_auth_headers(),
                        params=params,
                        content=json.dumps(options or {}),
                    )
                else:
                    response = client.get(
                        url,
                        headers=self._get_auth_headers(),
                        params=params,
                    )
        except httpx.HTTPError as e:
            log_event(
                logger,
                component="monobank",
                operation=operation,
                outcome="failed",
                duration_ms=elapsed_ms(started_at),
                reason=type(e).__name__,
                level="error",
            )
            raise MonoTransportError(f"Request to Mono API failed: {e}") from e

        duration_ms = elapsed_ms(started_at)
        data = self._decode_response(response, operation)

        if response.status_code == 200:
            log_event(
                logger,
                component="monobank",
                operation=operation,
                outcome="success",
                status_code=200,
                duration_ms=duration_ms,
            )
            return data

        error = self._build_api_error(data, response.status_code, response.text)
        log_event(
            logger,
            component="monobank",
            operation=operation,
            outcome="failed",
            status_code=response.status_code,
            duration_ms=duration_ms,
            reason=error.message[:_LOG_BODY_LIMIT],
            level="error",
        )
        raise error

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """General GET request to the API using the token"""
        return self.request(path, None, is_post=False, params=params)

    @staticmethod
    def _decode_response(response: httpx.Response, operation: str) -> Dict[str, Any]:
        content = response.text
        if not content:
            logger.error(f"MONO_EMPTY_RESPONSE [operation={operation}, status={response.status_code}]")
            raise MonoTransportError("Empty response from Mono API")

        try:
            data = json.loads(content)
        except ValueError as e:
            logger.error(
                f"MONO_INVALID_JSON [operation={operation}, status={response.status_code}, "
                f"body={content[:_LOG_BODY_LIMIT]}]"
            )
            raise MonoDecodeError(f"Can not decode json response from Mono: {content}") from e

        if not isinstance(data, dict):
            logger.error(f"MONO_INVALID_RESPONSE_TYPE [operation={operation}, type={type(data).__name__}]")
            raise MonoDecodeError(f"Can not decode json response from Mono: {content}")
        return data

    @staticmethod
    def _build_api_error(data: Dict[str, Any], status_code: int, raw: str) -> MonoAPIError:
        description = data.get("errorDescription")
        if description is not None:
            return MonoAPIError(str(description), status_code, raw=raw)

        err_code = data.get("errCode")
        err_text = data.get("errText")
        if err_code is not None and err_text is not None:
            return MonoAPIError(
                f"errText: {err_text}; errCode: {err_code}",
                status_code,
                err_code=str(err_code),
                err_text=str(err_text),
                raw=raw,
            )

        return MonoAPIError(f"Unknown error response: {raw}", status_code, raw=raw)

    # ================================================================================
    # Merchant
    # ================================================================================

    def get_merchant_details(self) -> Dict[str, Any]:
        """
        Merchant data: {"merchantId": ..., "merchantName": ..., "edrpou": ...}

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1details/get
        """
        return self.get("/api/merchant/details")

    def get_public_key(self) -> str:
        """
        Public key (base64 PEM) for webhook signature verification

        The key may be cached by the caller and refreshed only when
        verification with the cached key stops working.

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1pubkey/get
        """
        data = self.get("/api/merchant/pubkey")
        key = data.get("key")
        # Only a missing field is a bad response; an empty key fails verification
        if key is None:
            logger.error("MONO_PUBKEY_MISSING [operation=GET /api/merchant/pubkey]")
            raise MonoAPIError("Invalid response from Mono API", 500, raw=json.dumps(data))
        return key

    # ================================================================================
    # Invoices
    # ================================================================================

    def create_payment(self, amount: int, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create an invoice

        Args:
            amount: Amount in minor units (kopecks for UAH), must be > 0
            options: Extra API fields (ccy, merchantPaymInfo, redirectUrl,
                webHookUrl, validity, paymentType, ...)

        Returns:
            {"invoiceId": ..., "pageUrl": ...}

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1create/post
        """
        params = CreateInvoiceParams(amount=amount, options=dict(options or {}))
        return self.request("/api/merchant/invoice/create", params.to_payload())

    def get_payment_status(self, invoice_id: str) -> Dict[str, Any]:
        """
        Invoice status, for when the merchant side is out of sync or no
        webHookUrl was given on creation.

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1status?invoiceId=%7BinvoiceId%7D/get
        """
        ref = InvoiceRef(invoice_id)
        return self.get("/api/merchant/invoice/status", params=ref.to_params())

    def refund_payment(self, invoice_id: str, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Cancel a successful payment (full or partial refund)

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1cancel/post
        """
        params = RefundParams(invoice_id=invoice_id, options=dict(options or {}))
        return self.request("/api/merchant/invoice/cancel", params.to_payload())

    def invalidate_payment(self, invoice_id: str) -> Dict[str, Any]:
        """
        Invalidate an invoice that has not been paid yet

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1remove/post
        """
        ref = InvoiceRef(invoice_id)
        return self.request("/api/merchant/invoice/remove", ref.to_payload())

    def finalize_payment(self, invoice_id: str, amount: Optional[int] = None) -> Dict[str, Any]:
        """
        Finalize a hold. The final amount must not exceed the held amount.

        Args:
            invoice_id: Invoice ID
            amount: Amount in minor units, only to charge less than the hold

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1finalize/post
        """
        params = FinalizeParams(invoice_id=invoice_id, amount=amount)
        return self.request("/api/merchant/invoice/finalize", params.to_payload())

    def get_payment_success_details(self, invoice_id: str) -> Dict[str, Any]:
        """
        Extended data about a successful payment, if there was one

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1invoice~1payment-info?invoiceId=%7BinvoiceId%7D/get
        """
        ref = InvoiceRef(invoice_id)
        return self.get("/api/merchant/invoice/payment-info", params=ref.to_params())

    def get_payments_list(self, timestamp_from: int, timestamp_to: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Statement: payments for a period

        Args:
            timestamp_from: UTC unix timestamp
            timestamp_to: UTC unix timestamp, omitted from the query when not set

        Returns:
            The "list" field of the response, [] when absent

        https://api.monobank.ua/docs/acquiring.html#/paths/~1api~1merchant~1statement/get
        """
        query = StatementQuery(timestamp_from=timestamp_from, timestamp_to=timestamp_to)
        data = self.get("/api/merchant/statement", params=query.to_params())
        return data.get("list") or []

    # ================================================================================
    # Webhooks
    # ================================================================================

    def verify_webhook(
        self,
        content: Optional[bytes] = None,
        public_key_base64: Optional[str] = None,
        x_sign_base64: Optional[str] = None,
        request: Optional[InboundWebhook] = None,
    ) -> bool:
        """
        Check whether webhook data can be trusted

        Arguments left as None are resolved in order: the public key is
        fetched with get_public_key(), the signature is read from the
        X-Sign header of `request` and the payload from its raw body.
        An explicit empty string is not resolved and fails.

        Args:
            content: Raw request body
            public_key_base64: Public key as returned by get_public_key()
            x_sign_base64: Value of the X-Sign header
            request: Inbound webhook to take missing values from

        Returns:
            True only when the signature matches

        Raises:
            MonoVerificationError: Public key, signature or body is missing,
                or the public key cannot be loaded
        """
        if public_key_base64 is None:
            public_key_base64 = self.get_public_key()

        if x_sign_base64 is None and request is not None:
            x_sign_base64 = request.signature

        if content is None and request is not None:
            content = request.body

        return verify_signature(content, public_key_base64, x_sign_base64)
