"""
rgpd_compliance.services

Service layer (transaction owners).

Responsibilities:
- Apply business rules on top of repositories.
- Own commit boundaries and audit events.
"""

# Package marker; services are imported directly from submodules.
