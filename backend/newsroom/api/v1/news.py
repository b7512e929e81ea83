"""
News article endpoints.

Reads are public (drafts only for admins); writes require an admin token.
Shares count only on published articles.
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from newsroom.api.dependencies import AdminCaller, NewsLifecycle, OptionalCaller
from newsroom.api.v1.content import is_admin, list_params, page_payload, serialize
from newsroom.schemas.common import success_response
from newsroom.schemas.content import NewsCreate, NewsUpdate, NewsView

router = APIRouter()

ListParams = Annotated[Dict[str, Any], Depends(list_params)]


@router.get("")
async def list_news(params: ListParams, lifecycle: NewsLifecycle, caller: OptionalCaller) -> dict:
    """
    Paginated article listing.

    Non-admin callers only ever see published articles, whatever status
    they ask for.
    """
    page = await lifecycle.list(params, caller_is_admin=is_admin(caller))
    return success_response(page_payload(NewsView, "articles", page))


@router.get("/featured")
async def featured_news(lifecycle: NewsLifecycle, limit: int = 5) -> dict:
    articles = await lifecycle.featured(limit)
    return success_response({"articles": serialize(NewsView, articles)})


@router.get("/trending")
async def trending_news(lifecycle: NewsLifecycle, limit: int = 10) -> dict:
    articles = await lifecycle.trending(limit)
    return success_response({"articles": serialize(NewsView, articles)})


@router.get("/search")
async def search_news(
    lifecycle: NewsLifecycle,
    q: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> dict:
    """Free-text search over title, summary and body of published articles."""
    result = await lifecycle.list({"search": q or "", "page": page, "limit": limit}, caller_is_admin=False)
    payload = page_payload(NewsView, "articles", result)
    payload["query"] = q
    return success_response(payload)


@router.get("/category/{category}")
async def news_by_category(
    category: str,
    lifecycle: NewsLifecycle,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> dict:
    result = await lifecycle.list({"category": category, "page": page, "limit": limit}, caller_is_admin=False)
    payload = page_payload(NewsView, "articles", result)
    payload["category"] = category
    return success_response(payload)


@router.get("/{article_id}")
async def get_news(
    article_id: str,
    lifecycle: NewsLifecycle,
    caller: OptionalCaller,
    increment_view: Annotated[bool, Query()] = True,
) -> dict:
    """
    One article plus up to five related published articles.

    Errors:
        404 unknown id, 403 draft requested by a non-admin
    """
    article, related = await lifecycle.view(article_id, is_admin(caller), increment_view)
    return success_response({
        "article": NewsView.model_validate(article),
        "related_articles": serialize(NewsView, related),
    })


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_news(request: NewsCreate, lifecycle: NewsLifecycle, caller: AdminCaller) -> dict:
    article = await lifecycle.create(request.model_dump(exclude_unset=True), owner_id=caller.user_id)
    return success_response({"article": NewsView.model_validate(article)}, "Article created successfully")


@router.put("/{article_id}")
async def update_news(article_id: str, request: NewsUpdate, lifecycle: NewsLifecycle, caller: AdminCaller) -> dict:
    article = await lifecycle.update(article_id, request.model_dump(exclude_unset=True))
    return success_response({"article": NewsView.model_validate(article)}, "Article updated successfully")


@router.delete("/{article_id}")
async def delete_news(article_id: str, lifecycle: NewsLifecycle, caller: AdminCaller) -> dict:
    await lifecycle.delete(article_id)
    return success_response(message="Article deleted successfully")


@router.post("/{article_id}/share")
async def share_news(article_id: str, lifecycle: NewsLifecycle) -> dict:
    """
    Count one share.

    Errors:
        404 unknown id, 403 article not published
    """
    shares = await lifecycle.record_engagement(article_id, "share")
    return success_response({"shares": shares}, "Article shared successfully")
