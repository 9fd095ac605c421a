"""
Hi-Pot Test Log - Database Seed Data
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-01): Default admin account on first start
"""

import logging

from services.auth_gate import hash_password
from services.credential_store import CredentialStore

log = logging.getLogger(__name__)


async def seed_if_empty(credentials: CredentialStore, cfg) -> bool:
    """Create the default account unless it already exists.

    Returns True when the account was created.
    """
    username = cfg.DEFAULT_ADMIN_USERNAME
    if await credentials.get_by_username(username):
        log.info("Default account %s already present", username)
        return False

    log.info("Seeding default account %s", username)
    await credentials.create_user(
        username, hash_password(cfg.DEFAULT_ADMIN_PASSWORD, cfg.BCRYPT_ROUNDS))
    return True
