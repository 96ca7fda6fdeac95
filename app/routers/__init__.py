"""
SelfEmploy Portal - Routers Package

FastAPI route handlers.

Routers:
- auth: Admin login and current admin permissions
- public: Public site (catalogue, registration, status check, self-confirm)
- registrations: Registration management
- categories: Category management
- panchayaths: Panchayath management
- content: Announcements and utility links
- admin_users: Admin accounts and permission grants
- accounts: Cash book (balances, transfers, expenses)
- reports: Registration summary and panchayath grades
"""

from app.routers import (
    accounts,
    admin_users,
    auth,
    categories,
    content,
    panchayaths,
    public,
    registrations,
    reports,
)

__all__ = [
    "accounts",
    "admin_users",
    "auth",
    "categories",
    "content",
    "panchayaths",
    "public",
    "registrations",
    "reports",
]
