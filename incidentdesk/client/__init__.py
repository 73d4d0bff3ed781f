"""
Incident client package.

Usage:
    from incidentdesk.client import IncidentClient, ListState
"""

from incidentdesk.client.api import IncidentClient, IncidentClientError, IncidentPage
from incidentdesk.client.state import IncidentDraft, ListState, page_window

__all__ = [
    "IncidentClient",
    "IncidentClientError",
    "IncidentPage",
    "IncidentDraft",
    "ListState",
    "page_window",
]
