from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Request
from sqlalchemy.engine import Engine

from familybudget.application.services.operation_service import OperationService
from familybudget.infrastructure.persistence.sqla import SqlOperationRepository, get_engine
from familybudget.logger import get_logger
from familybudget.settings import Settings


@dataclass(slots=True)
class ApiContext:
    settings: Settings
    logger: Any
    engine: Engine
    operations: OperationService


def build_context(settings: Settings) -> ApiContext:
    logger = get_logger()
    engine = get_engine(settings)
    service = OperationService(
        SqlOperationRepository(engine),
        query_timeout_seconds=settings.query_timeout_seconds,
        logger=logger,
    )
    return ApiContext(settings=settings, logger=logger, engine=engine, operations=service)


def get_ctx(request: Request) -> ApiContext:
    return request.app.state.ctx
