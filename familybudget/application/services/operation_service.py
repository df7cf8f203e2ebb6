from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

from familybudget.application.validation import (
    validate_analytics_params,
    validate_list_params,
    validate_operation,
    validate_operation_id,
)
from familybudget.domain.errors import DomainError, InternalError, QueryTimeoutError
from familybudget.domain.models.analytics import AnalyticsSummary
from familybudget.domain.models.operation import (
    Operation,
    RequestParamAnalytics,
    RequestParamOperations,
)
from familybudget.domain.ports.operation_repository import OperationRepositoryPort
from familybudget.logger import get_logger

_T = TypeVar("_T")


class OperationService:
    """
    Use cases over the operations store.

    Repository calls are blocking; each one runs in the loop's default
    executor under a deadline. Domain errors raised by the store pass through
    untouched; anything else is logged here and replaced by ``InternalError``.
    """

    def __init__(
        self,
        repo: OperationRepositoryPort,
        *,
        query_timeout_seconds: float,
        logger: Any = None,
    ) -> None:
        self._repo = repo
        self._timeout = query_timeout_seconds
        self._logger = logger or get_logger()

    async def _call(self, action: str, fn: Callable[..., _T], *args: Any, log: Any = None) -> _T:
        log = log or self._logger
        try:
            loop = asyncio.get_running_loop()
            # an expired call is abandoned; its worker thread finishes on its own
            return await asyncio.wait_for(
                loop.run_in_executor(None, partial(fn, *args)), timeout=self._timeout
            )
        except TimeoutError as exc:
            log.warning(f"{action} exceeded {self._timeout:.1f}s deadline")
            raise QueryTimeoutError() from exc
        except QueryTimeoutError:
            log.warning(f"{action} cancelled by the store")
            raise
        except InternalError as exc:
            log.opt(exception=exc.__cause__ or exc).error(f"{action} failed in store")
            raise
        except DomainError:
            raise
        except Exception as exc:
            log.opt(exception=exc).error(f"{action} failed unexpectedly")
            raise InternalError() from exc

    async def ping(self) -> None:
        await self._call("store ping", self._repo.ping)

    async def create_operation(self, op: Operation) -> int:
        normalized = validate_operation(op)
        return await self._call("create operation", self._repo.create, normalized)

    async def get_operation(self, op_id: int) -> Operation:
        validate_operation_id(op_id)
        log = self._logger.bind(operation_id=str(op_id))
        return await self._call("get operation", self._repo.get, op_id, log=log)

    async def list_operations(self, params: RequestParamOperations | None = None) -> list[Operation]:
        validated = validate_list_params(params or RequestParamOperations())
        return await self._call("list operations", self._repo.list, validated)

    async def update_operation(self, op: Operation) -> None:
        validate_operation_id(op.id)
        normalized = validate_operation(op)
        log = self._logger.bind(operation_id=str(op.id))
        await self._call("update operation", self._repo.update, normalized, log=log)

    async def delete_operation(self, op_id: int) -> None:
        validate_operation_id(op_id)
        log = self._logger.bind(operation_id=str(op_id))
        await self._call("delete operation", self._repo.delete, op_id, log=log)

    async def get_analytics(self, params: RequestParamAnalytics | None = None) -> AnalyticsSummary:
        validated = validate_analytics_params(params or RequestParamAnalytics())

        if validated.group_by is None:
            return await self._call("analytics summary", self._repo.analytics_summary, validated)

        # both queries are independent; the summary always covers the ungrouped scope
        summary, groups = await asyncio.gather(
            self._call("analytics summary", self._repo.analytics_summary, validated),
            self._call("analytics groups", self._repo.analytics_group, validated),
        )
        summary.key = validated.group_by
        summary.groups = groups
        return summary
