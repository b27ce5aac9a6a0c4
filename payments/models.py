"""
Request parameter objects for monobank acquiring endpoints.

Each object validates its input on construction and serializes to the
JSON body (to_payload) or query string mapping (to_params) sent to the API.
Keys injected by the client (amount, invoiceId) override same-named keys
supplied in options.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from payments.exceptions import MonoArgumentError


def _ensure_invoice_id(invoice_id: Optional[str]) -> None:
    if not invoice_id:
        raise MonoArgumentError("invoiceId is empty. Must be defined")
    if not isinstance(invoice_id, str):
        raise MonoArgumentError(f"invoiceId must be a string, got {type(invoice_id).__name__}")


def _is_positive_int(value: Any) -> bool:
    # bool is an int subclass, True would pass as amount=1
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class CreateInvoiceParams:
    """Invoice creation: amount in minor units (kopecks) plus optional API fields"""
    amount: int
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not _is_positive_int(self.amount):
            raise MonoArgumentError("Amount must be a natural number")

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.options)
        payload["amount"] = self.amount
        return payload


@dataclass(frozen=True)
class InvoiceRef:
    """Reference to an existing invoice"""
    invoice_id: str

    def __post_init__(self):
        _ensure_invoice_id(self.invoice_id)

    def to_payload(self) -> Dict[str, Any]:
        return {"invoiceId": self.invoice_id}

    def to_params(self) -> Dict[str, Any]:
        return {"invoiceId": self.invoice_id}


@dataclass(frozen=True)
class RefundParams:
    """Cancellation of a successful payment (full or partial: extRef, amount, items)"""
    invoice_id: str
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _ensure_invoice_id(self.invoice_id)

    def to_payload(self) -> Dict[str, Any]:
        payload = dict(self.options)
        payload["invoiceId"] = self.invoice_id
        return payload


@dataclass(frozen=True)
class FinalizeParams:
    """Hold finalization; amount must not exceed the held amount"""
    invoice_id: str
    amount: Optional[int] = None

    def __post_init__(self):
        _ensure_invoice_id(self.invoice_id)
        if self.amount is not None and not _is_positive_int(self.amount):
            raise MonoArgumentError("Amount must be a natural number")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"invoiceId": self.invoice_id}
        if self.amount is not None:
            payload["amount"] = self.amount
        return payload


@dataclass(frozen=True)
class StatementQuery:
    """Statement period as UTC unix timestamps (seconds)"""
    timestamp_from: int
    timestamp_to: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.timestamp_from, int) or isinstance(self.timestamp_from, bool):
            raise MonoArgumentError("from must be a unix timestamp")
        if self.timestamp_from < 0:
            raise MonoArgumentError("from must not be negative")
        if self.timestamp_to is not None:
            if not isinstance(self.timestamp_to, int) or isinstance(self.timestamp_to, bool):
                raise MonoArgumentError("to must be a unix timestamp")
            if self.timestamp_to and self.timestamp_to < self.timestamp_from:
                raise MonoArgumentError("to must not be earlier than from")

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {"from": self.timestamp_from}
        # 0 means "not set", same as None
        if self.timestamp_to:
            params["to"] = self.timestamp_to
        return params
