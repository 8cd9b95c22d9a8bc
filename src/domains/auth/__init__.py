# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain services.

This module provides authentication services:
- Password hashing with bcrypt
- JWT token creation and validation bound to sessions
- Email/password sign-up, sign-in and session management

Exports:
    PasswordHasher: Secure password hashing using bcrypt.
    JWTManager: JWT token creation and validation.
    AuthService: Session management service.
"""

from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import AuthService, ClientInfo

__all__ = [
    "PasswordHasher",
    "JWTManager",
    "AuthService",
    "ClientInfo",
]
