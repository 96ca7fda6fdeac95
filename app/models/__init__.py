"""
SelfEmploy Portal - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin
from app.models.admin_user import (
    AdminUser,
    AdminPermission,
    AdminRole,
    PermissionModule,
    PermissionType,
)
from app.models.category import Category
from app.models.panchayath import Panchayath
from app.models.registration import Registration, RegistrationStatus
from app.models.accounts import (
    CashTransaction,
    CashTransactionType,
    Expense,
    PaymentMethod,
)
from app.models.content import Announcement, Utility

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "AdminUser",
    "AdminPermission",
    "AdminRole",
    "PermissionModule",
    "PermissionType",
    "Category",
    "Panchayath",
    "Registration",
    "RegistrationStatus",
    "CashTransaction",
    "CashTransactionType",
    "Expense",
    "PaymentMethod",
    "Announcement",
    "Utility",
]
