"""
Schema routes for the API.

One request maps to exactly one migration run. The endpoint is a plain
``def`` so FastAPI executes the blocking database work in its threadpool
and one slow migration does not stall other requests.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.exceptions import (
    DatabaseConnectionError,
    MigrationError,
    ValidationError,
)
from logger import get_logger
from models.migration import MigrationResult
from services.api.schemas import (
    ApplySchemaRequest,
    ErrorDetail,
    ErrorResponse,
    MigrationResultResponse,
)
from services.api.targets import (
    RunnerFactory,
    TargetResolver,
    get_runner_factory,
    get_target_resolver,
)

log = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["schema"])


def _error(
    status_code: int,
    code: str,
    message: str,
    details: Optional[str] = None,
    result: Optional[MigrationResult] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            details=details,
            result=MigrationResultResponse.from_result(result) if result is not None else None,
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post(
    "/projects/{project_id}/schema",
    response_model=MigrationResultResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse},
               500: {"model": ErrorResponse}},
)
def apply_schema(
    project_id: str,
    request: ApplySchemaRequest,
    resolver: TargetResolver = Depends(get_target_resolver),
    runner_factory: RunnerFactory = Depends(get_runner_factory),
):
    """
    Apply a SQL script to the project's database in a single transaction.
    """
    try:
        descriptor = resolver(project_id)
    except KeyError:
        return _error(404, "PROJECT_NOT_FOUND", "Project not found",
                      f"unknown project: {project_id}")

    try:
        runner = runner_factory(descriptor)
    except DatabaseConnectionError as e:
        log.error("Could not connect to database for project %s: %s", project_id, e)
        return _error(500, "MIGRATION_FAILED", "Failed to connect to database", str(e))

    with runner:
        try:
            result = runner.apply_migration(request.sql)
        except ValidationError as e:
            return _error(400, "INVALID_SQL", "SQL validation failed", str(e), e.result)
        except MigrationError as e:
            log.error("Migration failed for project %s: %s", project_id, e)
            return _error(500, "MIGRATION_FAILED", "Failed to apply schema", str(e), e.result)

    log.info("Schema applied to project %s: %s", project_id, result)
    return MigrationResultResponse.from_result(result)
