"""Reporting collaborators notified of final test outcomes."""
from integrations.base import ReportingCollaborator
from integrations.manager import IntegrationManager

__all__ = [
    "ReportingCollaborator",
    "IntegrationManager",
]
