"""
Design record persistence (through the record gateway).
"""

from __future__ import annotations

from typing import Any

from core.gateway import RecordGateway

DESIGNS_TABLE = "designs"
DESIGN_COLUMNS = (
    "design_id",
    "client",
    "fabric",
    "comments",
    "approved",
    "final_dress",
    "created_at",
)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def create_design(gateway: RecordGateway, fields: dict[str, Any]) -> dict[str, Any]:
    return await gateway.insert(DESIGNS_TABLE, fields)


async def list_designs(
    gateway: RecordGateway,
    *,
    client: str | None = None,
    fabric: str | None = None,
    approved: list[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[dict[str, Any]]:
    """
    List designs, newest first.

    - client: case-insensitive substring match
    - approved: one or more accepted values (IN)
    """
    conditions: dict[str, Any] = {}
    if client:
        conditions["client"] = {"operator": "ILIKE", "value": _like_pattern(client)}
    if fabric:
        conditions["fabric"] = fabric
    if approved:
        conditions["approved"] = approved[0] if len(approved) == 1 else list(approved)

    return await gateway.find(
        DESIGNS_TABLE,
        conditions,
        columns=DESIGN_COLUMNS,
        order_by="created_at DESC",
        limit=limit,
        offset=offset,
    )


async def get_design(gateway: RecordGateway, design_id: str) -> dict[str, Any] | None:
    rows = await gateway.find(
        DESIGNS_TABLE,
        {"design_id": design_id},
        columns=DESIGN_COLUMNS,
        limit=1,
    )
    return rows[0] if rows else None


async def update_design(gateway: RecordGateway, design_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    rows = await gateway.update(DESIGNS_TABLE, fields, {"design_id": design_id})
    return rows[0]


async def delete_design(gateway: RecordGateway, design_id: str) -> list[dict[str, Any]]:
    return await gateway.delete(DESIGNS_TABLE, {"design_id": design_id})
