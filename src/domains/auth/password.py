# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing utilities using bcrypt.

Example:
    >>> hasher = PasswordHasher()
    >>> hashed = hasher.hash("my_password")
    >>> hasher.verify("my_password", hashed)
    True
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordPolicyError(ValueError):
    """Raised when a password does not satisfy the length policy."""

    pass


class PasswordHasher:
    """Account password hashing using bcrypt.

    Attributes:
        _rounds: Number of bcrypt rounds for hashing.
        _min_length: Minimum accepted password length.

    Example:
        >>> hasher = PasswordHasher(rounds=4)
        >>> hashed = hasher.hash("secure_password")
        >>> hasher.verify("wrong_password", hashed)
        False
    """

    def __init__(self, rounds: int = 12, min_length: int = 8) -> None:
        self._rounds = rounds
        self._min_length = min_length

    def check_policy(self, password: str) -> None:
        """Validate a new password.

        Raises:
            PasswordPolicyError: If the password is too short or longer
                than bcrypt can hash.
        """
        if len(password) < self._min_length:
            raise PasswordPolicyError(
                f"Password must be at least {self._min_length} characters"
            )
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise PasswordPolicyError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes"
            )

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password to hash.

        Returns:
            Bcrypt hash string with salt embedded.

        Raises:
            PasswordPolicyError: If the password fails the policy.
        """
        self.check_policy(password)

        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str | None) -> bool:
        """Verify a password against a stored hash.

        Accounts without a password never verify.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:BCRYPT_MAX_BYTES],
                password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False
