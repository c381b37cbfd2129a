"""
Client-side state and API layer for the auto parts storefront.
"""

from storefront.api import ApiClient
from storefront.app import Storefront
from storefront.errors import ApiError, FieldErrors
from storefront.guard import GuardDecision, guard, price_label, resolve

__all__ = [
    "ApiClient",
    "ApiError",
    "FieldErrors",
    "GuardDecision",
    "Storefront",
    "guard",
    "price_label",
    "resolve",
]
