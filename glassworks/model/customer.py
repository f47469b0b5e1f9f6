from sqlmodel import Field

from glassworks.model.base import BaseModel


class Customer(BaseModel, table=True):
    """Customer of a business owner account."""

    __tablename__ = "customer"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    name: str = Field(nullable=False, index=True)
    phone: str = Field(default="")
    email: str = Field(default="")
    address: str = Field(default="")
    gst: str = Field(default="")
    notes: str = Field(default="")
