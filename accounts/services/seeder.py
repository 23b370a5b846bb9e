"""
Development seed data. Never enable in production.
"""

from __future__ import annotations

import logging

from accounts.models.user import Role
from accounts.services.user_service import AccountFailure, UserService

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = [
    ("Administrator", "admin@mail.com", "admin", Role.admin),
    ("Manager", "manager@mail.com", "manager", Role.manager),
    ("Guest", "guest@mail.com", "guest", Role.guest),
]


async def seed(service: UserService, demo_users: int = 100) -> int:
    """Add the default accounts plus *demo_users* guest accounts.

    Accounts whose email already exists are skipped, so seeding twice is
    harmless. Returns the number of accounts created.
    """
    accounts = list(DEFAULT_ACCOUNTS)
    accounts += [
        (f"Demo User {n:03d}", f"user{n:03d}@mail.com", "password", Role.guest)
        for n in range(1, demo_users + 1)
    ]

    created = 0
    for name, email, password, role in accounts:
        result = await service.add_user(name, email, password, role)
        if result is not AccountFailure.CONFLICT:
            created += 1
    logger.info("Seeded %d of %d accounts", created, len(accounts))
    return created
