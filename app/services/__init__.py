"""
SelfEmploy Portal - Services Package

Business logic services.
"""

from app.services.admin_service import AdminService
from app.services.category_service import CategoryService
from app.services.content_service import ContentService
from app.services.grading_service import GradingService
from app.services.ledger_service import LedgerService
from app.services.panchayath_service import PanchayathService
from app.services.registration_service import RegistrationService
from app.services.reports_service import ReportsService

__all__ = [
    "AdminService",
    "CategoryService",
    "ContentService",
    "GradingService",
    "LedgerService",
    "PanchayathService",
    "RegistrationService",
    "ReportsService",
]
