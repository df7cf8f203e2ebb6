from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from familybudget.api.dependencies import ApiContext, get_ctx
from familybudget.api.schemas.common import ApiErrorEnvelope
from familybudget.api.schemas.operations import AnalyticsSummaryOut
from familybudget.api.schemas.queries import analytics_query
from familybudget.application.services.export_service import analytics_csv, csv_headers
from familybudget.domain.models.operation import RequestParamAnalytics

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    responses={
        400: {"model": ApiErrorEnvelope},
        500: {"model": ApiErrorEnvelope},
    },
)


@router.get("", response_model=AnalyticsSummaryOut, response_model_exclude_none=True)
async def get_analytics(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    params: Annotated[RequestParamAnalytics, Depends(analytics_query)],
) -> AnalyticsSummaryOut:
    summary = await ctx.operations.get_analytics(params)
    return AnalyticsSummaryOut.from_summary(summary)


@router.get("/csv")
async def export_analytics_csv(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    params: Annotated[RequestParamAnalytics, Depends(analytics_query)],
) -> Response:
    summary = await ctx.operations.get_analytics(params)
    return Response(
        content=analytics_csv(summary),
        media_type="text/csv",
        headers=csv_headers("analytics.csv"),
    )
