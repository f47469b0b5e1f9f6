from glassworks.model.base import BaseModel
from glassworks.model.account import Account
from glassworks.model.audit_log import AuditLog
from glassworks.model.customer import Customer
from glassworks.model.product import Product
from glassworks.model.quotation import Quotation
from glassworks.model.order import Order
from glassworks.model.invoice import Invoice
from glassworks.model.payment import Payment
from glassworks.model.company_settings import CompanySettings

__all__ = [
    "BaseModel",
    "Account",
    "AuditLog",
    "Customer",
    "Product",
    "Quotation",
    "Order",
    "Invoice",
    "Payment",
    "CompanySettings",
]
