# blogwebapp/utils/__init__.py
"""
Utility package shared across the backend.
"""

from .datetime_utils import DateTimeUtils

__all__ = ['DateTimeUtils']
