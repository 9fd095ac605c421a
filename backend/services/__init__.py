"""
Hi-Pot Test Log - Backend Services
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): Initial services module
"""

from . import errors
from . import credential_store
from . import auth_gate
from . import certificate_renderer
from . import audit_store
from . import ingestion
from . import query_service
