# backend/routes/insights.py

import math
from datetime import datetime
from typing import List, Literal, Optional, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator

from backend import config
from backend.services.insight_service import (
    build_embedding,
    related_insights,
    suggest_tags,
    trending_insights,
)

router = APIRouter(prefix="/insights")


class InsightPayload(BaseModel):
    id: str
    title: str = ""
    body: str = ""
    tags: List[str] = Field(default_factory=list)
    embedding: List[float] = Field(default_factory=list)
    visibility: Literal["public", "private"] = "public"
    is_hidden: bool = False
    upvote_count: int = Field(default=0, ge=0)
    downvote_count: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None

    @field_validator("embedding")
    @classmethod
    def _drop_non_finite_embedding(cls, v: List[float]) -> List[float]:
        # NaN / inf vectors are unusable, treat them like a failed embedding
        if not all(math.isfinite(x) for x in v):
            return []
        return v


class ContentRequest(BaseModel):
    title: str = ""
    body: str = ""


class RelatedRequest(BaseModel):
    target: InsightPayload
    candidates: List[InsightPayload] = Field(default_factory=list)
    limit: int = config.RELATED_DEFAULT_LIMIT


class TrendingRequest(BaseModel):
    candidates: List[InsightPayload] = Field(default_factory=list)
    window: Union[str, int] = f"{config.TRENDING_DEFAULT_WINDOW_DAYS}d"
    q: str = ""
    tag: str = ""
    limit: int = config.TRENDING_DEFAULT_LIMIT


@router.post("/suggest-tags")
def suggest_tags_route(req: ContentRequest):
    """
    Suggest up to 5 tags from title + body using local keyword extraction.
    Bengali content gets no suggestions.
    """
    return {"tags": suggest_tags(req.title, req.body)}


@router.post("/embedding")
def embedding_route(req: ContentRequest):
    """
    Embedding for Related Insights. An empty list means the
    inference service was unavailable.
    """
    embedding = build_embedding(req.title, req.body)
    return {"embedding": embedding, "dimension": len(embedding)}


@router.post("/related")
def related_route(req: RelatedRequest):
    related = related_insights(
        req.target.model_dump(),
        [c.model_dump() for c in req.candidates],
        limit=req.limit,
    )
    return {"id": req.target.id, "related": related}


@router.post("/trending")
def trending_route(req: TrendingRequest):
    trending = trending_insights(
        [c.model_dump() for c in req.candidates],
        window=req.window,
        q=req.q,
        tag=req.tag,
        limit=req.limit,
    )
    return {"trending": trending}
