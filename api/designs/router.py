"""
Design records API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from core import db, sheets
from core.gateway import RecordGateway

from . import schemas, service

router = APIRouter()


@router.post("/designs", status_code=status.HTTP_201_CREATED)
async def create_design(
    request: schemas.DesignCreateRequest,
    gateway: RecordGateway = Depends(db.get_gateway),
    sheets_client: sheets.SheetsClient | None = Depends(sheets.get_sheets_client),
) -> dict:
    design = await service.create_design(gateway, request, sheets_client=sheets_client)
    return {"success": True, "data": design}


@router.get("/designs")
async def list_designs(
    client: str | None = Query(default=None, max_length=200),
    fabric: str | None = Query(default=None, max_length=200),
    approved: list[str] | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    gateway: RecordGateway = Depends(db.get_gateway),
) -> dict:
    designs = await service.list_designs(
        gateway,
        client=client,
        fabric=fabric,
        approved=approved,
        limit=limit,
        offset=offset,
    )
    return {
        "success": True,
        "data": designs,
        "limit": limit,
        "offset": offset,
        "count": len(designs),
    }


@router.get("/designs/{design_id}")
async def get_design(
    design_id: str,
    gateway: RecordGateway = Depends(db.get_gateway),
) -> dict:
    design = await service.get_design(gateway, design_id)
    return {"success": True, "data": design}


@router.patch("/designs/{design_id}")
async def update_design(
    design_id: str,
    request: schemas.DesignUpdateRequest,
    gateway: RecordGateway = Depends(db.get_gateway),
) -> dict:
    design = await service.update_design(gateway, design_id, request)
    return {"success": True, "data": design}


@router.delete("/designs/{design_id}")
async def delete_design(
    design_id: str,
    gateway: RecordGateway = Depends(db.get_gateway),
) -> dict:
    deleted = await service.delete_design(gateway, design_id)
    return {"success": True, "data": deleted, "count": len(deleted)}
