"""
Comments API client for the JSONPlaceholder /comments resource.

Besides CRUD it offers aggregate statistics over the comments of a post.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from ..framework import response_validator as rv
from ..framework.config_loader import PerformanceThresholds
from ..framework.data_generators import is_valid_email
from ..framework.http_client import TimedHttpClient
from .base_api import BaseApiClient


@dataclass(frozen=True)
class CommentStatistics:
    """
    Aggregates over the comments of one post.

    `longest_comment` / `shortest_comment` are the first comment with the
    maximum / minimum body length, or None when there are no comments.
    """
    total: int
    unique_emails: int
    average_body_length: float
    longest_comment: Optional[Dict[str, Any]]
    shortest_comment: Optional[Dict[str, Any]]


class CommentsApi(BaseApiClient):
    """CRUD, filtering and statistics for comments."""

    resource_name = "comment"
    schema = rv.COMMENT_SCHEMA

    def __init__(
        self,
        http_client: TimedHttpClient,
        performance: Optional[PerformanceThresholds] = None,
    ) -> None:
        super().__init__(http_client, "/comments", performance)

    async def get_by_post_id(self, post_id: int) -> List[Dict[str, Any]]:
        return await self.get_related(
            self.endpoint,
            "postId",
            post_id,
            params={"postId": post_id},
            validate=self.validate_entity,
        )

    async def search_by_email(self, email: str) -> List[Dict[str, Any]]:
        return await self.search("email", email)

    async def get_statistics(self, post_id: int) -> CommentStatistics:
        """
        Compute statistics over the comments of a post.

        Args:
            post_id: Owning post

        Returns:
            CommentStatistics; an empty post yields zeros and no extremes
        """
        comments = await self.get_by_post_id(post_id)

        if not comments:
            logger.info(f"Post {post_id} has no comments")
            return CommentStatistics(0, 0, 0.0, None, None)

        lengths = [len(comment["body"]) for comment in comments]
        stats = CommentStatistics(
            total=len(comments),
            unique_emails=len({comment["email"] for comment in comments}),
            average_body_length=sum(lengths) / len(lengths),
            longest_comment=max(comments, key=lambda c: len(c["body"])),
            shortest_comment=min(comments, key=lambda c: len(c["body"])),
        )
        logger.debug(
            f"Post {post_id}: {stats.total} comments, {stats.unique_emails} unique emails, "
            f"avg body {stats.average_body_length:.1f} chars"
        )
        return stats

    def validate_email(self, comment: Mapping[str, Any]) -> None:
        """Comment email passes the syntax check."""
        email = comment.get("email")
        rv.assert_that(
            is_valid_email(email),
            field="comment.email",
            expected="valid email",
            actual=email,
        )


__all__ = ["CommentStatistics", "CommentsApi"]
