from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel as PydanticBaseModel, field_validator
from sqlmodel import Session, select

from glassworks.auth.dependencies import get_current_account
from glassworks.db.session import get_session
from glassworks.model.account import Account
from glassworks.model.base import utc_now
from glassworks.model.customer import Customer
from glassworks.model.invoice import Invoice
from glassworks.model.order import Order
from glassworks.model.product import Product
from glassworks.model.quotation import Quotation

router = APIRouter()


def _not_empty(v: str | None) -> str | None:
    if v is not None and not v.strip():
        raise ValueError("field must not be empty")
    return v.strip() if v is not None else None


def get_owned_or_404(session: Session, model, row_id: int, account: Account, label: str):
    # Rows of other accounts answer 404, their existence is not disclosed.
    row = session.get(model, row_id)
    if not row or row.account_id != account.id:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


# ============================================================================
# Customer Endpoints
# ============================================================================

class CustomerCreate(PydanticBaseModel):
    name: str
    phone: str = ""
    email: str = ""
    address: str = ""
    gst: str = ""
    notes: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _not_empty(v)


class CustomerUpdate(PydanticBaseModel):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    gst: str | None = None
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _not_empty(v)


class CustomerResponse(PydanticBaseModel):
    id: int
    name: str
    phone: str
    email: str
    address: str
    gst: str
    notes: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerListResponse(PydanticBaseModel):
    items: list[CustomerResponse]
    total: int


@router.post("/customer", response_model=CustomerResponse, status_code=201, tags=["Customer"])
def create_customer(
    body: CustomerCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    customer = Customer(account_id=account.id, **body.model_dump())
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


@router.get("/customer/list", response_model=CustomerListResponse, tags=["Customer"])
def list_customer(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    """Customers of the authenticated account, by name."""
    items = session.exec(
        select(Customer).where(Customer.account_id == account.id).order_by(Customer.name)
    ).all()
    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in items],
        total=len(items),
    )


@router.get("/customer/{customer_id}", response_model=CustomerResponse, tags=["Customer"])
def get_customer(
    customer_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_owned_or_404(session, Customer, customer_id, account, "Customer")


@router.put("/customer/{customer_id}", response_model=CustomerResponse, tags=["Customer"])
def update_customer(
    customer_id: int,
    body: CustomerUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    customer = get_owned_or_404(session, Customer, customer_id, account, "Customer")
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(customer, field, value)
    customer.updated_at = utc_now()
    session.add(customer)
    session.commit()
    session.refresh(customer)
    return customer


@router.delete("/customer/{customer_id}", status_code=204, tags=["Customer"])
def delete_customer(
    customer_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    customer = get_owned_or_404(session, Customer, customer_id, account, "Customer")
    for document in (Quotation, Order, Invoice):
        if session.exec(select(document.id).where(document.customer_id == customer.id)).first() is not None:
            raise HTTPException(status_code=409, detail="Customer has billing documents and cannot be deleted")
    session.delete(customer)
    session.commit()


# ============================================================================
# Product Endpoints
# ============================================================================

class ProductCreate(PydanticBaseModel):
    name: str
    category: str = ""
    thickness: str = ""
    unit: str = "sq ft"
    price: float = 0
    description: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _not_empty(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        if v < 0:
            raise ValueError("price must not be negative")
        return v


class ProductUpdate(PydanticBaseModel):
    name: str | None = None
    category: str | None = None
    thickness: str | None = None
    unit: str | None = None
    price: float | None = None
    description: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return _not_empty(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("price must not be negative")
        return v


class ProductResponse(PydanticBaseModel):
    id: int
    name: str
    category: str
    thickness: str
    unit: str
    price: float
    description: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductListResponse(PydanticBaseModel):
    items: list[ProductResponse]
    total: int


@router.post("/product", response_model=ProductResponse, status_code=201, tags=["Product"])
def create_product(
    body: ProductCreate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    product = Product(account_id=account.id, **body.model_dump())
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@router.get("/product/list", response_model=ProductListResponse, tags=["Product"])
def list_product(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    items = session.exec(
        select(Product).where(Product.account_id == account.id).order_by(Product.name)
    ).all()
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get("/product/{product_id}", response_model=ProductResponse, tags=["Product"])
def get_product(
    product_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_owned_or_404(session, Product, product_id, account, "Product")


@router.put("/product/{product_id}", response_model=ProductResponse, tags=["Product"])
def update_product(
    product_id: int,
    body: ProductUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    product = get_owned_or_404(session, Product, product_id, account, "Product")
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(product, field, value)
    product.updated_at = utc_now()
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@router.delete("/product/{product_id}", status_code=204, tags=["Product"])
def delete_product(
    product_id: int,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    product = get_owned_or_404(session, Product, product_id, account, "Product")
    session.delete(product)
    session.commit()
