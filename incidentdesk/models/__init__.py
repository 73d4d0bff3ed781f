"""
Model Package Initialization
============================

Ensures models are properly registered when imported by the application.

Usage:
    from incidentdesk.models import Incident
"""

from .incident import Incident, MUTABLE_FIELDS

__all__ = [
    "Incident",
    "MUTABLE_FIELDS",
]
