"""
Helpers shared by the news and video routers.

Both content kinds expose the same read surface; only the payload keys
(``articles``/``article`` vs ``videos``/``video``) and the view schema
differ.
"""

from typing import Any, Dict, Iterable, Optional, Type

from pydantic import BaseModel

from newsroom.services.auth_guard import Caller
from newsroom.services.lifecycle import Page


def is_admin(caller: Optional[Caller]) -> bool:
    return caller is not None and caller.is_admin


def serialize(view: Type[BaseModel], items: Iterable[Any]) -> list:
    return [view.model_validate(item) for item in items]


def page_payload(view: Type[BaseModel], key: str, page: Page) -> Dict[str, Any]:
    return {key: serialize(view, page.items), "pagination": page.pagination()}


def list_params(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> Dict[str, Any]:
    """Listing query parameters; validated by ``ContentLifecycle.resolve_filter``."""
    return {
        "page": page,
        "limit": limit,
        "category": category,
        "status": status,
        "search": search,
        "featured": featured,
        "sort": sort,
        "order": order,
    }
