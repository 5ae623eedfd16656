"""
Users API client for the JSONPlaceholder /users resource.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..framework import response_validator as rv
from ..framework.config_loader import PerformanceThresholds
from ..framework.http_client import TimedHttpClient
from .base_api import BaseApiClient


class UsersApi(BaseApiClient):
    """CRUD and relation queries for users."""

    resource_name = "user"
    schema = rv.USER_SCHEMA

    def __init__(
        self,
        http_client: TimedHttpClient,
        performance: Optional[PerformanceThresholds] = None,
    ) -> None:
        super().__init__(http_client, "/users", performance)

    async def search_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Users whose name contains `name`, case-insensitively."""
        return await self.search("name", name)

    async def get_posts(self, user_id: int) -> List[Dict[str, Any]]:
        return await self.get_related(f"{self.item_path(user_id)}/posts", "userId", user_id)

    async def get_albums(self, user_id: int) -> List[Dict[str, Any]]:
        return await self.get_related(f"{self.item_path(user_id)}/albums", "userId", user_id)


__all__ = ["UsersApi"]
