"""
Core backend base components shared by the POS apps.
"""

from .viewsets import POSViewSet

__all__ = [
    "POSViewSet",
]
