import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from errors import SheetWriteError
from token_provider import TokenProvider

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


class SheetAppender:
    """Appends rows to one range of one spreadsheet through the Sheets REST API."""

    def __init__(
        self,
        token_provider: TokenProvider,
        spreadsheet_id: str,
        cell_range: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.token_provider = token_provider
        self.spreadsheet_id = spreadsheet_id
        self.cell_range = cell_range
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def append_url(self) -> str:
        return f"{SHEETS_API}/{self.spreadsheet_id}/values/{quote(self.cell_range, safe='')}:append"

    def append_row(self, values: List[str]) -> Dict[str, Any]:
        """
        Appends `values` as a single row with valueInputOption=RAW, so the
        API stores the strings as-is without parsing formulas or dates.

        Returns the API's response body. AuthError from the token provider
        propagates; any failure of the append call itself raises
        SheetWriteError. A 401 also drops the cached token.
        """
        token = self.token_provider.get_access_token()

        try:
            response = self.session.post(
                self.append_url,
                params={"valueInputOption": "RAW"},
                headers={"Authorization": f"Bearer {token}"},
                json={"values": [list(values)]},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise SheetWriteError(f"Sheets API unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = response.text

        if not 200 <= response.status_code < 300:
            if response.status_code == 401:
                # token was revoked before its expiry; the next request fetches a new one
                self.token_provider.invalidate()
            detail = json.dumps(payload) if isinstance(payload, dict) else payload
            raise SheetWriteError(detail, status_code=response.status_code)

        updated = payload.get("updates", {}).get("updatedRange") if isinstance(payload, dict) else None
        logger.info(f"Appended row to {self.spreadsheet_id} ({updated or self.cell_range})")
        return payload
