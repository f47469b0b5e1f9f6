from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy import func
from sqlmodel import Session, select

from glassworks.model.base import utc_now
from glassworks.model.invoice import Invoice, InvoiceStatus
from glassworks.model.order import Order
from glassworks.model.payment import Payment
from glassworks.model.quotation import Quotation


def _money(value: float) -> float:
    return round(float(value), 2)


@dataclass(frozen=True)
class InvoiceTotals:
    items: list[dict[str, Any]]
    subtotal: float
    tax: float
    total: float


def price_items(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Recompute `amount = quantity * rate` for every line."""
    priced = []
    for item in items:
        quantity = float(item.get("quantity") or 0)
        rate = float(item.get("rate") or 0)
        priced.append(
            {
                "description": item.get("description") or "",
                "quantity": quantity,
                "unit": item.get("unit") or "",
                "rate": rate,
                "amount": _money(quantity * rate),
            }
        )
    return priced


def compute_totals(items: Iterable[dict[str, Any]], tax_rate: float, discount: float = 0) -> InvoiceTotals:
    """
    subtotal = Σ amount, tax = subtotal * tax_rate / 100,
    total = subtotal + tax - discount (never negative).
    """
    priced = price_items(items)
    subtotal = _money(sum(item["amount"] for item in priced))
    tax = _money(subtotal * float(tax_rate) / 100)
    total = _money(max(subtotal + tax - float(discount or 0), 0))
    return InvoiceTotals(items=priced, subtotal=subtotal, tax=tax, total=total)


def apply_totals(invoice: Invoice, items: Iterable[dict[str, Any]]) -> None:
    totals = compute_totals(items, invoice.tax_rate, invoice.discount)
    invoice.items = totals.items
    invoice.subtotal = totals.subtotal
    invoice.tax = totals.tax
    invoice.total = totals.total
    invoice.balance = _money(invoice.total - invoice.paid)


def settle(invoice: Invoice, paid: float) -> None:
    """Update paid/balance and the payment-driven part of the status."""
    invoice.paid = _money(paid)
    invoice.balance = _money(invoice.total - invoice.paid)
    if invoice.paid > 0 and invoice.balance <= 0:
        invoice.status = InvoiceStatus.PAID
    elif invoice.paid > 0:
        invoice.status = InvoiceStatus.PARTIAL
    elif invoice.status in (InvoiceStatus.PAID, InvoiceStatus.PARTIAL):
        # Every payment was removed.
        invoice.status = InvoiceStatus.SENT
    invoice.updated_at = utc_now()


def recompute_paid(session: Session, invoice: Invoice) -> None:
    paid = session.exec(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.invoice_id == invoice.id)
    ).one()
    settle(invoice, paid)


def apply_quoted_totals(document: Quotation | Order, items: Iterable[dict[str, Any]]) -> None:
    """Totals of a quotation or order: no discount, nothing paid."""
    totals = compute_totals(items, document.tax_rate)
    document.items = totals.items
    document.subtotal = totals.subtotal
    document.tax = totals.tax
    document.total = totals.total


def next_document_number(session: Session, model: type[Quotation] | type[Order], account_id: int, prefix: str) -> str:
    """QT0001, ORD0002, ...: one more than the documents the account already has."""
    count = session.exec(
        select(func.count()).select_from(model).where(model.account_id == account_id)
    ).one()
    return f"{prefix}{count + 1:04d}"
