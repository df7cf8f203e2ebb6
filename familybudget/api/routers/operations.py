from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from familybudget.api.dependencies import ApiContext, get_ctx
from familybudget.api.schemas.common import ApiErrorEnvelope
from familybudget.api.schemas.operations import OperationOut, OperationPayload
from familybudget.api.schemas.queries import operations_query, parse_operation_id
from familybudget.application.services.export_service import csv_headers, operations_csv
from familybudget.domain.models.operation import RequestParamOperations

router = APIRouter(
    prefix="/operations",
    tags=["operations"],
    responses={
        400: {"model": ApiErrorEnvelope},
        500: {"model": ApiErrorEnvelope},
    },
)


@router.post("", status_code=204)
async def create_operation(
    payload: OperationPayload,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> Response:
    op_id = await ctx.operations.create_operation(payload.to_domain())
    return Response(status_code=204, headers={"Location": f"/operations/{op_id}"})


@router.get("", response_model=list[OperationOut])
async def list_operations(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    params: Annotated[RequestParamOperations, Depends(operations_query)],
) -> list[OperationOut]:
    items = await ctx.operations.list_operations(params)
    return [OperationOut.model_validate(op) for op in items]


# declared before /{operation_id} so "csv" is not taken for an id
@router.get("/csv")
async def export_operations_csv(
    ctx: Annotated[ApiContext, Depends(get_ctx)],
    params: Annotated[RequestParamOperations, Depends(operations_query)],
) -> Response:
    items = await ctx.operations.list_operations(params)
    return Response(
        content=operations_csv(items),
        media_type="text/csv",
        headers=csv_headers("operations.csv"),
    )


@router.get("/{operation_id}", response_model=OperationOut, responses={404: {"model": ApiErrorEnvelope}})
async def get_operation(
    operation_id: str,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> OperationOut:
    op = await ctx.operations.get_operation(parse_operation_id(operation_id))
    return OperationOut.model_validate(op)


@router.patch("/{operation_id}", status_code=204, responses={404: {"model": ApiErrorEnvelope}})
async def update_operation(
    operation_id: str,
    payload: OperationPayload,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> Response:
    op_id = parse_operation_id(operation_id)
    await ctx.operations.update_operation(payload.to_domain(op_id))
    return Response(status_code=204)


@router.delete("/{operation_id}", status_code=204, responses={404: {"model": ApiErrorEnvelope}})
async def delete_operation(
    operation_id: str,
    ctx: Annotated[ApiContext, Depends(get_ctx)],
) -> Response:
    await ctx.operations.delete_operation(parse_operation_id(operation_id))
    return Response(status_code=204)
