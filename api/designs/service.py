"""
Design records business logic.

Scope:
- translate gateway failures into HTTP errors
- mirror newly created designs into the spreadsheet (when configured)

The spreadsheet append happens before the database insert and is not undone
when the insert fails.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status

from core import errors, sheets
from core.gateway import RecordGateway

from . import repository, schemas

logger = logging.getLogger(__name__)

SHEET_COLUMNS = ("design_id", "client", "fabric", "comments", "approved", "final_dress")

_STATUS_BY_ERROR: tuple[tuple[type[errors.GatewayError], int], ...] = (
    (errors.ValidationError, status.HTTP_400_BAD_REQUEST),
    (errors.UnscopedMutationError, status.HTTP_400_BAD_REQUEST),
    (errors.MissingFieldError, status.HTTP_400_BAD_REQUEST),
    (errors.NoMatchError, status.HTTP_404_NOT_FOUND),
    (errors.DuplicateRecordError, status.HTTP_409_CONFLICT),
    (errors.DanglingReferenceError, 422),
)


def http_error(exc: errors.GatewayError) -> HTTPException:
    for kind, code in _STATUS_BY_ERROR:
        if isinstance(exc, kind):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _sheet_row(fields: dict[str, Any]) -> list[Any]:
    added_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return [fields.get(name) for name in SHEET_COLUMNS] + [added_at]


async def _mirror_to_sheet(client: sheets.SheetsClient, fields: dict[str, Any]) -> None:
    try:
        await client.append_row(sheets.designs_range(), _sheet_row(fields))
    except sheets.SheetsError as exc:
        logger.exception("sheet_mirror_failed design_id=%s", fields.get("design_id"))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to write design to spreadsheet: {exc}",
        ) from exc


async def create_design(
    gateway: RecordGateway,
    payload: schemas.DesignCreateRequest,
    *,
    sheets_client: sheets.SheetsClient | None = None,
) -> dict[str, Any]:
    fields = payload.model_dump(exclude_none=True)
    if sheets_client is not None:
        await _mirror_to_sheet(sheets_client, fields)

    try:
        return await repository.create_design(gateway, fields)
    except errors.GatewayError as exc:
        raise http_error(exc) from exc


async def list_designs(
    gateway: RecordGateway,
    *,
    client: str | None = None,
    fabric: str | None = None,
    approved: list[str] | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[dict[str, Any]]:
    try:
        return await repository.list_designs(
            gateway,
            client=(client or "").strip() or None,
            fabric=(fabric or "").strip() or None,
            approved=[a.strip() for a in approved or [] if a.strip()] or None,
            limit=limit,
            offset=offset,
        )
    except errors.GatewayError as exc:
        raise http_error(exc) from exc


async def get_design(gateway: RecordGateway, design_id: str) -> dict[str, Any]:
    try:
        row = await repository.get_design(gateway, design_id)
    except errors.GatewayError as exc:
        raise http_error(exc) from exc
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Design not found.")
    return row


async def update_design(
    gateway: RecordGateway,
    design_id: str,
    payload: schemas.DesignUpdateRequest,
) -> dict[str, Any]:
    fields = payload.model_dump(exclude_unset=True)
    try:
        return await repository.update_design(gateway, design_id, fields)
    except errors.GatewayError as exc:
        raise http_error(exc) from exc


async def delete_design(gateway: RecordGateway, design_id: str) -> list[dict[str, Any]]:
    try:
        return await repository.delete_design(gateway, design_id)
    except errors.GatewayError as exc:
        raise http_error(exc) from exc
