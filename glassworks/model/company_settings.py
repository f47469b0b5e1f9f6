from sqlmodel import Field

from glassworks.model.base import BaseModel


class CompanySettings(BaseModel, table=True):
    """Company profile and billing defaults, one row per account."""

    __tablename__ = "settings"

    account_id: int = Field(foreign_key="account.id", unique=True, nullable=False)
    company_name: str = Field(default="")
    company_address: str = Field(default="")
    company_phone: str = Field(default="")
    company_email: str = Field(default="")
    company_gst: str = Field(default="")
    currency: str = Field(default="₹")
    tax_rate: float = Field(default=18)
    terms_and_conditions: str = Field(default="")
