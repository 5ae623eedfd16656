"""
Resource clients for the JSONPlaceholder REST API.

Usage:
    async with TimedHttpClient(config=config) as http:
        apis = ApiClients.create(http)
        users = await apis.users.get_all()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..framework.config_loader import PerformanceThresholds
from ..framework.http_client import TimedHttpClient
from .base_api import BaseApiClient
from .comments_api import CommentStatistics, CommentsApi
from .posts_api import PostsApi
from .users_api import UsersApi


@dataclass
class ApiClients:
    """The three resource clients sharing one HTTP client."""
    users: UsersApi
    posts: PostsApi
    comments: CommentsApi

    @classmethod
    def create(
        cls,
        http_client: TimedHttpClient,
        performance: Optional[PerformanceThresholds] = None,
    ) -> "ApiClients":
        return cls(
            users=UsersApi(http_client, performance),
            posts=PostsApi(http_client, performance),
            comments=CommentsApi(http_client, performance),
        )


__all__ = [
    "ApiClients",
    "BaseApiClient",
    "CommentStatistics",
    "CommentsApi",
    "PostsApi",
    "UsersApi",
]
