from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

import httpx
import typer

from cli.config import CLIConfig

_FILENAME = re.compile(r'filename="?([^";]+)"?')
_FILENAME_UTF8 = re.compile(r"filename\*=UTF-8''([^;\s]+)", re.IGNORECASE)


def filename_from_disposition(disposition: str, default: str) -> str:
    encoded = _FILENAME_UTF8.search(disposition)
    if encoded:
        return unquote(encoded.group(1))
    match = _FILENAME.search(disposition)
    return match.group(1) if match else default


class ApiClient:
    """Minimal HTTP client for the monitor service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_sites(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else None
        return self._request("GET", "/sites", params=params).json()

    def get_latest(self, site_id: str) -> Dict[str, Any]:
        return self._site_request(site_id, f"/sites/{site_id}/latest").json()

    def get_alerts(self, site_id: str) -> Dict[str, Any]:
        return self._site_request(site_id, f"/sites/{site_id}/alerts").json()

    def export_csv(self, site_id: str) -> Tuple[str, str]:
        """Return ``(filename, csv_text)`` for a site."""
        response = self._site_request(site_id, f"/sites/{site_id}/export.csv")
        disposition = response.headers.get("content-disposition", "")
        filename = filename_from_disposition(disposition, f"{site_id}_export.csv")
        return filename, response.text

    def list_thresholds(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/thresholds").json()

    def update_threshold(
        self,
        parameter: str,
        warning: Optional[float] = None,
        critical: Optional[float] = None,
    ) -> Dict[str, Any]:
        payload = {"warning": warning, "critical": critical}
        response = self._request(
            "PUT",
            f"/thresholds/{parameter}",
            json={key: value for key, value in payload.items() if value is not None},
        )
        return response.json()

    def stream(self, action: Optional[str] = None) -> Dict[str, Any]:
        if action is None:
            return self._request("GET", "/stream").json()
        return self._request("POST", f"/stream/{action}").json()

    def _site_request(self, site_id: str, path: str) -> httpx.Response:
        try:
            response = self._client.get(path)
            if response.status_code == 404:
                raise typer.BadParameter(f"Site {site_id} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
