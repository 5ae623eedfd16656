"""
In-memory stand-ins for JSONPlaceholder and reqres, served through
`httpx.MockTransport` so the unit suite never touches the network.

Only the behaviour the harness relies on is modelled: collection and item
routes, nested relations, `userId` / `postId` filters, `_sort` / `_order`,
`_page` / `_limit`, create echo with the next id, and reqres auth/pagination.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx


def make_user(user_id: int) -> Dict[str, Any]:
    return {
        "id": user_id,
        "name": f"User Number{user_id}",
        "username": f"user{user_id}",
        "email": f"user{user_id}@example.com",
        "phone": f"555-010{user_id % 10}",
        "website": f"user{user_id}.example.org",
        "address": {
            "street": f"{user_id} Main St",
            "suite": "Apt. 1",
            "city": "Springfield",
            "zipcode": "12345",
            "geo": {"lat": "0.0000", "lng": "0.0000"},
        },
        "company": {"name": "Acme", "catchPhrase": "Testing things", "bs": "synergy"},
    }


def make_post(post_id: int) -> Dict[str, Any]:
    return {
        "id": post_id,
        "title": f"post title {post_id}",
        "body": f"post body {post_id}",
        "userId": (post_id - 1) // 10 + 1,
    }


def make_comment(comment_id: int) -> Dict[str, Any]:
    return {
        "id": comment_id,
        "name": f"comment {comment_id}",
        "email": f"reader{comment_id % 3}@example.com",
        "body": "x" * (10 + comment_id % 5),
        "postId": (comment_id - 1) // 5 + 1,
    }


def make_album(album_id: int) -> Dict[str, Any]:
    return {"id": album_id, "title": f"album {album_id}", "userId": (album_id - 1) // 10 + 1}


def json_response(status: int, payload: Any) -> httpx.Response:
    return httpx.Response(status, json=payload)


class FakeJsonPlaceholder:
    """
    Callable handler for httpx.MockTransport emulating JSONPlaceholder.

    Records every request in `requests`.
    """

    RELATIONS = {
        ("users", "posts"): ("posts", "userId"),
        ("users", "albums"): ("albums", "userId"),
        ("posts", "comments"): ("comments", "postId"),
    }

    def __init__(self) -> None:
        self.data: Dict[str, List[Dict[str, Any]]] = {
            "users": [make_user(i) for i in range(1, 11)],
            "posts": [make_post(i) for i in range(1, 101)],
            "comments": [make_comment(i) for i in range(1, 501)],
            "albums": [make_album(i) for i in range(1, 101)],
        }
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        segments = [s for s in request.url.path.split("/") if s]

        if not segments or segments[0] not in self.data:
            return json_response(404, {})

        resource = segments[0]
        if len(segments) == 1:
            return self._collection(request, resource)
        if len(segments) == 2:
            return self._item(request, resource, segments[1])
        if len(segments) == 3:
            relation = self.RELATIONS.get((resource, segments[2]))
            if relation is None:
                return json_response(404, {})
            target, foreign_key = relation
            items = [i for i in self.data[target] if str(i[foreign_key]) == segments[1]]
            return json_response(200, items)
        return json_response(404, {})

    def _collection(self, request: httpx.Request, resource: str) -> httpx.Response:
        if request.method == "POST":
            payload = json.loads(request.content or b"{}")
            return json_response(201, {**payload, "id": len(self.data[resource]) + 1})
        if request.method != "GET":
            return json_response(404, {})

        params = request.url.params
        items = list(self.data[resource])

        for key, value in params.items():
            if not key.startswith("_"):
                items = [i for i in items if str(i.get(key)) == value]

        if "_sort" in params:
            items.sort(
                key=lambda i: i[params["_sort"]],
                reverse=params.get("_order", "asc") == "desc",
            )

        if "_limit" in params:
            limit = int(params["_limit"])
            page = int(params.get("_page", 1))
            items = items[(page - 1) * limit: page * limit]

        return json_response(200, items)

    def _item(self, request: httpx.Request, resource: str, raw_id: str) -> httpx.Response:
        item = self._find(resource, raw_id)
        payload = json.loads(request.content) if request.content else {}

        if request.method == "GET":
            return json_response(200, item) if item else json_response(404, {})
        if request.method == "PUT":
            if item is None:
                return json_response(500, "TypeError: Cannot read properties of undefined")
            return json_response(200, {**payload, "id": item["id"]})
        if request.method == "PATCH":
            if item is None:
                return json_response(404, {})
            return json_response(200, {**item, **payload})
        if request.method == "DELETE":
            return json_response(200, {})
        return json_response(404, {})

    def _find(self, resource: str, raw_id: str) -> Optional[Dict[str, Any]]:
        for item in self.data[resource]:
            if str(item["id"]) == raw_id:
                return item
        return None


class FakeReqres:
    """
    Handler emulating the reqres endpoints used by the auth suite.

    Requests without the `x-api-key` header are rejected with 401.
    """

    TOKEN = "QpwL5tke4Pnpja7X4"
    USERS_TOTAL = 12
    PER_PAGE = 6

    def __init__(self, api_key: str = "reqres-free-v1") -> None:
        self.api_key = api_key
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("x-api-key") != self.api_key:
            return json_response(401, {"error": "Missing API key"})

        path = request.url.path.replace("/api", "", 1)

        if request.method == "POST" and path in ("/register", "/login"):
            payload = json.loads(request.content or b"{}")
            if not payload.get("email"):
                return json_response(400, {"error": "Missing email or username"})
            if not payload.get("password"):
                return json_response(400, {"error": "Missing password"})
            if path == "/register":
                return json_response(200, {"id": 4, "token": self.TOKEN})
            return json_response(200, {"token": self.TOKEN})

        if request.method == "POST" and path == "/logout":
            return json_response(200, {})

        if request.method == "GET" and path == "/users":
            page = int(request.url.params.get("page", 1))
            start = (page - 1) * self.PER_PAGE + 1
            stop = min(start + self.PER_PAGE, self.USERS_TOTAL + 1)
            return json_response(200, {
                "page": page,
                "per_page": self.PER_PAGE,
                "total": self.USERS_TOTAL,
                "total_pages": -(-self.USERS_TOTAL // self.PER_PAGE),
                "data": [
                    {"id": i, "email": f"user{i}@reqres.in", "first_name": "First", "last_name": "Last"}
                    for i in range(start, stop)
                ],
            })

        if request.method == "GET" and path.startswith("/users/"):
            user_id = int(path.rsplit("/", 1)[1])
            if user_id > self.USERS_TOTAL:
                return json_response(404, {})
            return json_response(200, {"data": {"id": user_id, "email": f"user{user_id}@reqres.in"}})

        return json_response(404, {})
