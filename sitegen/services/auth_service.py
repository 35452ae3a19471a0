from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from sitegen.auth.security import create_access_token, hash_password, verify_password
from sitegen.middleware.error_handler import AuthError, NotFoundOrForbidden, ValidationError
from sitegen.repositories.user_repository import UserRepository
from sitegen.utils.logger import log_info

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email or password is incorrect"


class AuthService:
    """Registration, login and the current-user profile."""

    def __init__(self, users: UserRepository):
        self._users = users

    async def register(self, name: str, email: str, password: str) -> int:
        if not name or not email or not password:
            raise ValidationError("Name, email and password are required")
        # bcrypt is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(hash_password, password)
        user_id = await self._users.create(name, email.strip().lower(), password_hash)
        log_info(f"New user registered: {email}")
        return user_id

    async def login(self, email: str, password: str) -> str:
        if not email or not password:
            raise ValidationError("Email and password are required")
        user = await self._users.get_by_email(email.strip().lower())
        if user is None or not await asyncio.to_thread(verify_password, password, user["password_hash"]):
            logger.info("Failed login attempt for %s", email)
            raise AuthError(INVALID_CREDENTIALS)
        log_info(f"User logged in: {email}")
        return create_access_token(user["id"], user["name"], user["email"])

    async def current_user(self, user_id: int) -> Dict[str, Any]:
        profile = await self._users.get_profile(user_id)
        if profile is None:
            raise NotFoundOrForbidden("User not found")
        return profile
