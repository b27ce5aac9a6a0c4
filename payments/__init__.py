"""
monobank acquiring client

Synchronous API binding plus webhook signature verification.
"""

from payments.monobank import MonoAcquiring, API_URL

from payments.models import (
    CreateInvoiceParams,
    InvoiceRef,
    RefundParams,
    FinalizeParams,
    StatementQuery,
)

from payments.webhook import (
    InboundWebhook,
    SIGNATURE_HEADER,
    load_public_key,
    verify_signature,
    read_inbound_webhook,
    create_webhook_handler,
)

from payments.exceptions import (
    MonoAcquiringError,
    MonoArgumentError,
    MonoTransportError,
    MonoDecodeError,
    MonoAPIError,
    MonoVerificationError,
    MonoPublicKeyError,
)

__all__ = [
    "MonoAcquiring",
    "API_URL",
    "CreateInvoiceParams",
    "InvoiceRef",
    "RefundParams",
    "FinalizeParams",
    "StatementQuery",
    "InboundWebhook",
    "SIGNATURE_HEADER",
    "load_public_key",
    "verify_signature",
    "read_inbound_webhook",
    "create_webhook_handler",
    "MonoAcquiringError",
    "MonoArgumentError",
    "MonoTransportError",
    "MonoDecodeError",
    "MonoAPIError",
    "MonoVerificationError",
    "MonoPublicKeyError",
]
