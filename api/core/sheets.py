"""
Google Sheets HTTP client helpers (Sheets API v4).

Used endpoint:
- POST /{spreadsheetId}/values/{range}:append -> {"updates": {...}}
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx

DEFAULT_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_DESIGNS_RANGE = "Designs!A:G"


class SheetsError(RuntimeError):
    pass


@dataclass(frozen=True)
class SheetsConfig:
    spreadsheet_id: str
    access_token: str = ""
    base_url: str = DEFAULT_BASE_URL


def sheets_config() -> SheetsConfig | None:
    """
    None when no spreadsheet is configured (mirroring disabled).
    """
    spreadsheet_id = os.environ.get("SPREADSHEET_ID", "").strip()
    if not spreadsheet_id:
        return None
    return SheetsConfig(
        spreadsheet_id=spreadsheet_id,
        access_token=os.environ.get("GOOGLE_SHEETS_ACCESS_TOKEN", "").strip(),
        base_url=os.environ.get("SHEETS_BASE_URL", "").strip() or DEFAULT_BASE_URL,
    )


def designs_range() -> str:
    return os.environ.get("DESIGNS_SHEET_RANGE", "").strip() or DEFAULT_DESIGNS_RANGE


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:300]
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return resp.text[:300]


class SheetsClient:
    def __init__(
        self,
        config: SheetsConfig,
        *,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._timeout_s = timeout_s
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {}
        if self._config.access_token:
            headers["Authorization"] = f"Bearer {self._config.access_token}"
        return httpx.AsyncClient(
            base_url=self._config.base_url.rstrip("/"),
            headers=headers,
            timeout=self._timeout_s,
            transport=self._transport,
        )

    async def append_row(self, range_: str, values: list[Any]) -> dict[str, Any]:
        """
        Append one row after the last non-empty row of `range_`.

        Returns the API's `updates` summary.
        """
        if not values:
            raise SheetsError("Refusing to append an empty row.")

        try:
            async with self._client() as client:
                resp = await client.post(
                    f"/{self._config.spreadsheet_id}/values/{range_}:append",
                    params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                    json={"values": [[_cell(v) for v in values]]},
                )
        except httpx.HTTPError as exc:
            raise SheetsError(f"Failed to call Sheets append endpoint: {exc}") from exc

        if resp.status_code != 200:
            raise SheetsError(f"Sheets append failed: {resp.status_code} {_error_detail(resp)}")

        data: dict[str, Any] = resp.json()
        updates = data.get("updates")
        return updates if isinstance(updates, dict) else {}


def get_sheets_client() -> SheetsClient | None:
    """
    FastAPI dependency: None when mirroring is disabled.
    """
    config = sheets_config()
    if config is None:
        return None
    return SheetsClient(config)
