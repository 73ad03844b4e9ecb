"""
rgpd_compliance.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependencies (Principal, platform roles, company permissions).
"""

# Package marker.
