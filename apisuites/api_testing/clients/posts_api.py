"""
Posts API client for the JSONPlaceholder /posts resource.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..framework import response_validator as rv
from ..framework.config_loader import PerformanceThresholds
from ..framework.http_client import TimedHttpClient
from .base_api import BaseApiClient


class PostsApi(BaseApiClient):
    """CRUD and relation queries for posts."""

    resource_name = "post"
    schema = rv.POST_SCHEMA

    def __init__(
        self,
        http_client: TimedHttpClient,
        performance: Optional[PerformanceThresholds] = None,
    ) -> None:
        super().__init__(http_client, "/posts", performance)

    async def get_by_user_id(self, user_id: int) -> List[Dict[str, Any]]:
        """Posts filtered server-side by `userId`; each is schema-checked."""
        return await self.get_related(
            self.endpoint,
            "userId",
            user_id,
            params={"userId": user_id},
            validate=self.validate_entity,
        )

    async def get_comments(self, post_id: int) -> List[Dict[str, Any]]:
        return await self.get_related(
            f"{self.item_path(post_id)}/comments",
            "postId",
            post_id,
            validate=rv.validate_comment_schema,
        )

    async def search_by_title(self, title: str) -> List[Dict[str, Any]]:
        return await self.search("title", title)


__all__ = ["PostsApi"]
