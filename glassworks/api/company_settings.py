from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel as PydanticBaseModel, field_validator
from sqlmodel import Session, select

from glassworks.auth.dependencies import get_current_account
from glassworks.config import settings
from glassworks.db.session import get_session
from glassworks.model.account import Account
from glassworks.model.base import utc_now
from glassworks.model.company_settings import CompanySettings

router = APIRouter()


class CompanySettingsUpdate(PydanticBaseModel):
    company_name: str | None = None
    company_address: str | None = None
    company_phone: str | None = None
    company_email: str | None = None
    company_gst: str | None = None
    currency: str | None = None
    tax_rate: float | None = None
    terms_and_conditions: str | None = None

    @field_validator("tax_rate")
    @classmethod
    def validate_tax_rate(cls, v: float | None) -> float | None:
        if v is not None and not 0 <= v <= 100:
            raise ValueError("tax_rate must be between 0 and 100")
        return v


class CompanySettingsResponse(PydanticBaseModel):
    company_name: str
    company_address: str
    company_phone: str
    company_email: str
    company_gst: str
    currency: str
    tax_rate: float
    terms_and_conditions: str
    updated_at: datetime

    class Config:
        from_attributes = True


def get_or_create_company_settings(session: Session, account: Account) -> CompanySettings:
    """The settings row is created on first access, seeded from the account profile."""
    company = session.exec(
        select(CompanySettings).where(CompanySettings.account_id == account.id)
    ).first()
    if company:
        return company

    company = CompanySettings(
        account_id=account.id,
        company_name=account.company_name,
        company_phone=account.phone,
        company_email=account.email,
        tax_rate=settings.default_tax_rate,
    )
    session.add(company)
    session.commit()
    session.refresh(company)
    return company


@router.get("/settings", response_model=CompanySettingsResponse, tags=["Settings"])
def get_company_settings(
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    return get_or_create_company_settings(session, account)


@router.put("/settings", response_model=CompanySettingsResponse, tags=["Settings"])
def update_company_settings(
    body: CompanySettingsUpdate,
    account: Account = Depends(get_current_account),
    session: Session = Depends(get_session),
):
    company = get_or_create_company_settings(session, account)
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(company, field, value)
    company.updated_at = utc_now()
    session.add(company)
    session.commit()
    session.refresh(company)
    return company
