"""
Prospect Tracker - Models Package

from models import ProspectDocument, ProspectResponse, etc.
"""

from .prospect import (
    CallRecord,
    ProspectDocument,
    ProspectResponse,
    ListMeta,
    ProspectListResponse,
    ChartResponse,
    MessageResponse,
)

__all__ = [
    "CallRecord",
    "ProspectDocument",
    "ProspectResponse",
    "ListMeta",
    "ProspectListResponse",
    "ChartResponse",
    "MessageResponse",
]
