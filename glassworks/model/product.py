from sqlmodel import Field

from glassworks.model.base import BaseModel


class Product(BaseModel, table=True):
    """Glass product sold by the account (priced per `unit`)."""

    __tablename__ = "product"

    account_id: int = Field(foreign_key="account.id", index=True, nullable=False)
    name: str = Field(nullable=False, index=True)
    category: str = Field(default="")
    thickness: str = Field(default="")
    unit: str = Field(default="sq ft")
    price: float = Field(default=0)
    description: str = Field(default="")
