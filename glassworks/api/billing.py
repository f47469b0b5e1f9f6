from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel as PydanticBaseModel, field_validator
from sqlmodel import Session, select

from glassworks.api.catalog import get_owned_or_404
from glassworks.auth.dependencies import get_current_account
from glassworks.config import settings
from glassworks.db.session import get_session
from glassworks.model.account import Account
from glassworks.model.base import utc_now
from glassworks.model.company_settings import CompanySettings
from glassworks.model.customer import Customer
from glassworks.model.invoice import Invoice, InvoiceStatus
from glassworks.model.order import Order, OrderStatus
from glassworks.model.payment import Payment, PaymentMethod
from glassworks.model.quotation import Quotation, QuotationStatus
from glassworks.services.billing_service import (
    apply_quoted_totals,
    apply_totals,
    next_document_number,
    recompute_paid,
)

router = APIRouter()


def _default_tax_rate(session: Session, account_id: int) -> float:
    company = session.exec(
        select(CompanySettings).where(CompanySettings.account_id == account_id)
    ).first()
    return company.tax_rate if company else settings.default_tax_rate


def _owned_customer(session: Session, customer_id: int, account: Account) -> Customer:
    customer = session.get(Customer, customer_id)
    if not customer or customer.account_id != account.id:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


def _customer_snapshot(customer: Customer) -> dict[str, Any]:
    # Issued documents keep the customer data they were created with.
    return {
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "address": customer.address,
        "gst": customer.gst,
    }


# ============================================================================
# Invoice Endpoints
# ============================================================================

class LineItem(PydanticBaseModel):
    description: str = ""
    quantity: float = 0
    unit: str = ""
    rate: float = 0

    @field_validator("quantity", "rate")
    @classmethod
    def validate_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v


class InvoiceCreate(PydanticBaseModel):
    customer_id: int
    items: list[LineItem] = []
    tax_rate: float | None = None
    discount: float = 0
    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: datetime | None = None
    notes: str = ""

    @field_validator("discount")
    @classmethod
    def validate_discount(cls, v: float) -> float:
        if v < 0:
            raise ValueError("discount must not be negative")
        return v


class InvoiceUpdate(PydanticBaseModel):
    items: list[LineItem] | None = None
    tax_rate: float | None = None
    discount: float | None = None
    status: InvoiceStatus | None = None
    due_date: datetime | None = None
    notes: str | None = None

    @field_validator("discount")
    @classmethod
    def validate_discount(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("discount must not be negative")
        return v


class InvoiceResponse(PydanticBaseModel):
    id: int
    customer_id: int
    customer_snapshot: dict[str, Any]
    items: list[dict[str, Any]]
    subtotal: float
    tax_rate: float
    tax: float
    discount: float
    total: float
    paid: float
    balance: float
    status: InvoiceStatus
    due_date: datetime | None
    notes: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceListResponse(PydanticBaseModel):
    items: list[InvoiceResponse]
    total: int


@router.post("/invoice", response_model=InvoiceResponse, status_code=201, tags=["Invoice"])
def create_invoice(
    body: InvoiceCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """
    Create an invoice for one of the account's customers.
    Totals are computed from the items; the customer data is snapshotted.
    """
    customer = _owned_customer(session, body.customer_id, account)

    invoice = Invoice(
        account_id=account.id,
        customer_id=customer.id,
        customer_snapshot=_customer_snapshot(customer),
        tax_rate=body.tax_rate if body.tax_rate is not None else _default_tax_rate(session, account.id),
        discount=body.discount,
        status=body.status,
        due_date=body.due_date,
        notes=body.notes,
    )
    apply_totals(invoice, [item.model_dump() for item in body.items])
    session.add(invoice)
    session.commit()
    session.refresh(invoice)
    return invoice


@router.get("/invoice/list", response_model=InvoiceListResponse, tags=["Invoice"])
def list_invoice(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Invoices of the account, newest first."""
    items = session.exec(
        select(Invoice).where(Invoice.account_id == account.id).order_by(Invoice.created_at.desc(), Invoice.id.desc())
    ).all()
    return InvoiceListResponse(
        items=[InvoiceResponse.model_validate(i) for i in items],
        total=len(items),
    )


@router.get("/invoice/{invoice_id}", response_model=InvoiceResponse, tags=["Invoice"])
def get_invoice(
    invoice_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_owned_or_404(session, Invoice, invoice_id, account, "Invoice")


@router.put("/invoice/{invoice_id}", response_model=InvoiceResponse, tags=["Invoice"])
def update_invoice(
    invoice_id: int,
    body: InvoiceUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    invoice = get_owned_or_404(session, Invoice, invoice_id, account, "Invoice")

    if body.tax_rate is not None:
        invoice.tax_rate = body.tax_rate
    if body.discount is not None:
        invoice.discount = body.discount
    if body.status is not None:
        invoice.status = body.status
    if body.due_date is not None:
        invoice.due_date = body.due_date
    if body.notes is not None:
        invoice.notes = body.notes

    items = [item.model_dump() for item in body.items] if body.items is not None else list(invoice.items)
    apply_totals(invoice, items)
    # Totals changed: paid/balance/status must follow.
    recompute_paid(session, invoice)
    invoice.updated_at = utc_now()

    session.add(invoice)
    session.commit()
    session.refresh(invoice)
    return invoice


@router.delete("/invoice/{invoice_id}", status_code=204, tags=["Invoice"])
def delete_invoice(
    invoice_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Delete an invoice together with its payments."""
    invoice = get_owned_or_404(session, Invoice, invoice_id, account, "Invoice")
    for payment in session.exec(select(Payment).where(Payment.invoice_id == invoice.id)).all():
        session.delete(payment)
    session.flush()
    session.delete(invoice)
    session.commit()


# ============================================================================
# Payment Endpoints
# ============================================================================

class PaymentCreate(PydanticBaseModel):
    invoice_id: int
    amount: float
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_date: datetime | None = None
    reference_number: str = ""
    notes: str = ""

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("amount must be greater than zero")
        return v


class PaymentResponse(PydanticBaseModel):
    id: int
    invoice_id: int
    amount: float
    payment_method: PaymentMethod
    payment_date: datetime
    reference_number: str
    notes: str
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentListResponse(PydanticBaseModel):
    items: list[PaymentResponse]
    total: int


@router.post("/payment", response_model=PaymentResponse, status_code=201, tags=["Payment"])
def create_payment(
    body: PaymentCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Record a payment and update the invoice's paid, balance and status."""
    invoice = session.get(Invoice, body.invoice_id)
    if not invoice or invoice.account_id != account.id:
        raise HTTPException(status_code=404, detail="Invoice not found")

    payment = Payment(
        account_id=account.id,
        invoice_id=invoice.id,
        amount=body.amount,
        payment_method=body.payment_method,
        payment_date=body.payment_date or utc_now(),
        reference_number=body.reference_number,
        notes=body.notes,
    )
    session.add(payment)
    session.flush()
    recompute_paid(session, invoice)
    session.add(invoice)
    session.commit()
    session.refresh(payment)
    return payment


@router.get("/payment/list", response_model=PaymentListResponse, tags=["Payment"])
def list_payment(
    invoice_id: int | None = None,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Payments of the account, optionally of one invoice, newest first."""
    query = select(Payment).where(Payment.account_id == account.id)
    if invoice_id is not None:
        query = query.where(Payment.invoice_id == invoice_id)
    items = session.exec(query.order_by(Payment.payment_date.desc(), Payment.id.desc())).all()
    return PaymentListResponse(
        items=[PaymentResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.delete("/payment/{payment_id}", status_code=204, tags=["Payment"])
def delete_payment(
    payment_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    payment = get_owned_or_404(session, Payment, payment_id, account, "Payment")
    invoice = session.get(Invoice, payment.invoice_id)
    session.delete(payment)
    session.flush()
    if invoice:
        recompute_paid(session, invoice)
        session.add(invoice)
    session.commit()


# ============================================================================
# Quotation Endpoints
# ============================================================================

class QuotationCreate(PydanticBaseModel):
    customer_id: int
    items: list[LineItem] = []
    tax_rate: float | None = None
    status: QuotationStatus = QuotationStatus.DRAFT
    valid_until: datetime | None = None
    notes: str = ""


class QuotationUpdate(PydanticBaseModel):
    items: list[LineItem] | None = None
    tax_rate: float | None = None
    status: QuotationStatus | None = None
    valid_until: datetime | None = None
    notes: str | None = None


class QuotationResponse(PydanticBaseModel):
    id: int
    quotation_number: str
    customer_id: int
    customer_snapshot: dict[str, Any]
    items: list[dict[str, Any]]
    subtotal: float
    tax_rate: float
    tax: float
    total: float
    status: QuotationStatus
    valid_until: datetime | None
    notes: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuotationListResponse(PydanticBaseModel):
    items: list[QuotationResponse]
    total: int


@router.post("/quotation", response_model=QuotationResponse, status_code=201, tags=["Quotation"])
def create_quotation(
    body: QuotationCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    customer = _owned_customer(session, body.customer_id, account)
    quotation = Quotation(
        account_id=account.id,
        quotation_number=next_document_number(session, Quotation, account.id, "QT"),
        customer_id=customer.id,
        customer_snapshot=_customer_snapshot(customer),
        tax_rate=body.tax_rate if body.tax_rate is not None else _default_tax_rate(session, account.id),
        status=body.status,
        valid_until=body.valid_until,
        notes=body.notes,
    )
    apply_quoted_totals(quotation, [item.model_dump() for item in body.items])
    session.add(quotation)
    session.commit()
    session.refresh(quotation)
    return quotation


@router.get("/quotation/list", response_model=QuotationListResponse, tags=["Quotation"])
def list_quotation(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Quotations of the account, newest first."""
    items = session.exec(
        select(Quotation)
        .where(Quotation.account_id == account.id)
        .order_by(Quotation.created_at.desc(), Quotation.id.desc())
    ).all()
    return QuotationListResponse(
        items=[QuotationResponse.model_validate(q) for q in items],
        total=len(items),
    )


@router.get("/quotation/{quotation_id}", response_model=QuotationResponse, tags=["Quotation"])
def get_quotation(
    quotation_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_owned_or_404(session, Quotation, quotation_id, account, "Quotation")


@router.put("/quotation/{quotation_id}", response_model=QuotationResponse, tags=["Quotation"])
def update_quotation(
    quotation_id: int,
    body: QuotationUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    quotation = get_owned_or_404(session, Quotation, quotation_id, account, "Quotation")

    if body.tax_rate is not None:
        quotation.tax_rate = body.tax_rate
    if body.status is not None:
        quotation.status = body.status
    if body.valid_until is not None:
        quotation.valid_until = body.valid_until
    if body.notes is not None:
        quotation.notes = body.notes

    items = [item.model_dump() for item in body.items] if body.items is not None else list(quotation.items)
    apply_quoted_totals(quotation, items)
    quotation.updated_at = utc_now()

    session.add(quotation)
    session.commit()
    session.refresh(quotation)
    return quotation


@router.delete("/quotation/{quotation_id}", status_code=204, tags=["Quotation"])
def delete_quotation(
    quotation_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    quotation = get_owned_or_404(session, Quotation, quotation_id, account, "Quotation")
    session.delete(quotation)
    session.commit()


# ============================================================================
# Order Endpoints
# ============================================================================

class OrderCreate(PydanticBaseModel):
    customer_id: int
    items: list[LineItem] = []
    tax_rate: float | None = None
    status: OrderStatus = OrderStatus.PENDING
    expected_delivery: datetime | None = None
    notes: str = ""


class OrderUpdate(PydanticBaseModel):
    items: list[LineItem] | None = None
    tax_rate: float | None = None
    status: OrderStatus | None = None
    expected_delivery: datetime | None = None
    notes: str | None = None


class OrderResponse(PydanticBaseModel):
    id: int
    order_number: str
    customer_id: int
    customer_snapshot: dict[str, Any]
    items: list[dict[str, Any]]
    subtotal: float
    tax_rate: float
    tax: float
    total: float
    status: OrderStatus
    expected_delivery: datetime | None
    notes: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderListResponse(PydanticBaseModel):
    items: list[OrderResponse]
    total: int


@router.post("/order", response_model=OrderResponse, status_code=201, tags=["Order"])
def create_order(
    body: OrderCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    customer = _owned_customer(session, body.customer_id, account)
    order = Order(
        account_id=account.id,
        order_number=next_document_number(session, Order, account.id, "ORD"),
        customer_id=customer.id,
        customer_snapshot=_customer_snapshot(customer),
        tax_rate=body.tax_rate if body.tax_rate is not None else _default_tax_rate(session, account.id),
        status=body.status,
        expected_delivery=body.expected_delivery,
        notes=body.notes,
    )
    apply_quoted_totals(order, [item.model_dump() for item in body.items])
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


@router.get("/order/list", response_model=OrderListResponse, tags=["Order"])
def list_order(
    status: OrderStatus | None = None,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Orders of the account, optionally of one status, newest first."""
    query = select(Order).where(Order.account_id == account.id)
    if status is not None:
        query = query.where(Order.status == status)
    items = session.exec(query.order_by(Order.created_at.desc(), Order.id.desc())).all()
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in items],
        total=len(items),
    )


@router.get("/order/{order_id}", response_model=OrderResponse, tags=["Order"])
def get_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_owned_or_404(session, Order, order_id, account, "Order")


@router.put("/order/{order_id}", response_model=OrderResponse, tags=["Order"])
def update_order(
    order_id: int,
    body: OrderUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    order = get_owned_or_404(session, Order, order_id, account, "Order")

    if body.tax_rate is not None:
        order.tax_rate = body.tax_rate
    if body.status is not None:
        order.status = body.status
    if body.expected_delivery is not None:
        order.expected_delivery = body.expected_delivery
    if body.notes is not None:
        order.notes = body.notes

    items = [item.model_dump() for item in body.items] if body.items is not None else list(order.items)
    apply_quoted_totals(order, items)
    order.updated_at = utc_now()

    session.add(order)
    session.commit()
    session.refresh(order)
    return order


@router.delete("/order/{order_id}", status_code=204, tags=["Order"])
def delete_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    order = get_owned_or_404(session, Order, order_id, account, "Order")
    session.delete(order)
    session.commit()
