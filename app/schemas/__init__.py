"""
SelfEmploy Portal - Schemas Package

Pydantic schemas for request/response validation.
"""
