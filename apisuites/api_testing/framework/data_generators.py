"""
================================================================================
Test Data Generators
================================================================================

This module provides factory classes for generating test data.
It supports creating valid, invalid, and edge-case records for the
users / posts / comments resources.

Features:
- Random data generation with reproducible seeds
- Relationship-aware data generation (post requires user, comment requires post)
- Named invalid data sets for negative testing
- Email / URL syntax predicates

================================================================================
"""

import copy
import random
import re
import string
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit


ALPHANUMERIC = string.ascii_letters + string.digits

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")

# Schemes that are only valid with a host component
HOST_REQUIRED_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


# ================================================================================
# Factory Base
# ================================================================================

class DataFactoryBase:
    """
    Base class for test data factories.

    Each factory owns its own random generator so a seed reproduces the
    same sequence regardless of other factories.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize factory with optional random seed.

        Args:
            seed: Random seed for reproducible data generation
        """
        self._rng = random.Random(seed)

    def random_string(self, length: int = 10) -> str:
        """Generate random alphanumeric string (mixed case)."""
        return "".join(self._rng.choice(ALPHANUMERIC) for _ in range(length))

    def random_email(self, domain: str = "example.com") -> str:
        """Generate random email address."""
        return f"{self.random_string(8).lower()}@{domain}"

    def random_number(self, minimum: int = 1, maximum: int = 100) -> int:
        """Generate random integer within [minimum, maximum]."""
        return self._rng.randint(minimum, maximum)

    def random_coordinate(self, span: float) -> str:
        """Random coordinate in [-span/2, span/2) formatted to 4 decimals."""
        return f"{self._rng.random() * span - span / 2:.4f}"


# ================================================================================
# Entity Factories
# ================================================================================

class UserFactory(DataFactoryBase):
    """Factory for user records with nested address and company."""

    def create_valid(self, **overrides) -> Dict[str, Any]:
        """
        Create valid user data.

        Args:
            **overrides: Field overrides

        Returns:
            Valid user data dictionary
        """
        data = {
            "name": f"{self.random_string(6)} {self.random_string(8)}",
            "username": self.random_string(8).lower(),
            "email": self.random_email(),
            "phone": (
                f"{self.random_number(100, 999)}-{self.random_number(100, 999)}-"
                f"{self.random_number(1000, 9999)}"
            ),
            "website": f"{self.random_string(8).lower()}.com",
            "address": {
                "street": f"{self.random_number(1, 9999)} {self.random_string(8)} St",
                "suite": f"Apt. {self.random_number(1, 999)}",
                "city": self.random_string(8),
                "zipcode": str(self.random_number(10000, 99999)),
                "geo": {
                    "lat": self.random_coordinate(180),
                    "lng": self.random_coordinate(360),
                },
            },
            "company": {
                "name": f"{self.random_string(8)} Inc",
                "catchPhrase": " ".join(self.random_string(n) for n in (5, 7, 6)),
                "bs": " ".join(self.random_string(n) for n in (6, 8, 7)),
            },
        }

        data.update(overrides)
        return data

    def create_minimal(self) -> Dict[str, Any]:
        """Create user with only name, username and email."""
        return {
            "name": f"{self.random_string(6)} {self.random_string(8)}",
            "username": self.random_string(8).lower(),
            "email": self.random_email(),
        }


class PostFactory(DataFactoryBase):
    """Factory for post records. Posts always belong to a user."""

    def create_valid(self, user_id: int = 1, **overrides) -> Dict[str, Any]:
        data = {
            "title": self.random_string(20),
            "body": self.random_string(100),
            "userId": user_id,
        }
        data.update(overrides)
        return data


class CommentFactory(DataFactoryBase):
    """Factory for comment records. Comments always belong to a post."""

    def create_valid(self, post_id: int = 1, **overrides) -> Dict[str, Any]:
        data = {
            "name": self.random_string(15),
            "email": self.random_email(),
            "body": self.random_string(80),
            "postId": post_id,
        }
        data.update(overrides)
        return data


# ================================================================================
# Composite Factory
# ================================================================================

class TestDataFactory:
    """
    Composite factory providing access to all data factories.

    Usage:
        factory = TestDataFactory(seed=42)
        user = factory.user.create_valid()
        post = factory.post.create_valid(user_id=1)
    """

    __test__ = False  # not a pytest test class

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize all factories.

        Args:
            seed: Optional random seed for reproducibility
        """
        self.user = UserFactory(seed)
        self.post = PostFactory(seed)
        self.comment = CommentFactory(seed)


# ================================================================================
# Invalid Data Sets
# ================================================================================

INVALID_DATA_SETS: Dict[str, Dict[str, Dict[str, Any]]] = {
    "user": {
        "empty_name": {"name": "", "username": "test", "email": "test@example.com"},
        "invalid_email": {"name": "Test User", "username": "test", "email": "invalid-email"},
        "long_name": {"name": "a" * 1000, "username": "test", "email": "test@example.com"},
        "special_chars": {"name": "!@#$%^&*()", "username": "!@#$%", "email": "test@example.com"},
        "null_values": {"name": None, "username": None, "email": None},
    },
    "post": {
        "empty_title": {"title": "", "body": "Test body", "userId": 1},
        "empty_body": {"title": "Test title", "body": "", "userId": 1},
        "invalid_user_id": {"title": "Test title", "body": "Test body", "userId": "invalid"},
        "negative_user_id": {"title": "Test title", "body": "Test body", "userId": -1},
        "null_values": {"title": None, "body": None, "userId": None},
    },
}


# ================================================================================
# Convenience Functions
# ================================================================================

_default_factory = TestDataFactory()


def generate_random_string(length: int = 10) -> str:
    return _default_factory.user.random_string(length)


def generate_random_email(domain: str = "example.com") -> str:
    return _default_factory.user.random_email(domain)


def generate_random_number(minimum: int = 1, maximum: int = 100) -> int:
    return _default_factory.user.random_number(minimum, maximum)


def generate_random_user(**overrides) -> Dict[str, Any]:
    """Quick helper to create valid user data."""
    return _default_factory.user.create_valid(**overrides)


def generate_random_post(user_id: int = 1, **overrides) -> Dict[str, Any]:
    """Quick helper to create valid post data."""
    return _default_factory.post.create_valid(user_id, **overrides)


def generate_random_comment(post_id: int = 1, **overrides) -> Dict[str, Any]:
    """Quick helper to create valid comment data."""
    return _default_factory.comment.create_valid(post_id, **overrides)


def invalid_data(entity: str, case: str) -> Dict[str, Any]:
    """Return a fresh copy of a named invalid data set."""
    return copy.deepcopy(INVALID_DATA_SETS[entity][case])


def invalid_data_cases(entity: str) -> List[str]:
    return sorted(INVALID_DATA_SETS[entity])


# ================================================================================
# Content Predicates
# ================================================================================

def is_valid_email(email: Any) -> bool:
    """Permissive syntax check: something@something.something, no whitespace."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_url(url: Any) -> bool:
    """
    Absolute-URL syntax check.

    Requires a scheme; web schemes additionally require a host.
    """
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    if not parts.scheme or not SCHEME_PATTERN.fullmatch(parts.scheme):
        return False
    if parts.scheme.lower() in HOST_REQUIRED_SCHEMES and not parts.netloc:
        return False
    return True


def deep_clone(value: Any) -> Any:
    return copy.deepcopy(value)


__all__ = [
    "CommentFactory",
    "INVALID_DATA_SETS",
    "PostFactory",
    "TestDataFactory",
    "UserFactory",
    "deep_clone",
    "generate_random_comment",
    "generate_random_email",
    "generate_random_number",
    "generate_random_post",
    "generate_random_string",
    "generate_random_user",
    "invalid_data",
    "invalid_data_cases",
    "is_valid_email",
    "is_valid_url",
]
