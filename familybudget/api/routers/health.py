from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from familybudget.api.dependencies import ApiContext, get_ctx

router = APIRouter(tags=["health"])


@router.get("/ping")
async def ping() -> dict:
    return {"message": "pong"}


@router.get("/health")
async def health(ctx: Annotated[ApiContext, Depends(get_ctx)]) -> dict:
    await ctx.operations.ping()
    return {"status": "ok"}
