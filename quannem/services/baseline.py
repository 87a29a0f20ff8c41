"""
Baseline Data Loader

Loads the static, read-only seed data of a resource from its fixed
relative path: over HTTP when BASELINE_BASE_URL is set, otherwise from
the local static root. The baseline is optional: every failure
(network error, non-2xx status, bad JSON, wrong shape) yields an empty
list and a warning in the log, never an exception.

Nothing is cached; each load hits the source again.

Author: Your Name
Version: 1.0.0
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import httpx

logger = logging.getLogger(__name__)


class BaselineLoader:
    """Fetches baseline record lists for the known resources."""

    ENDPOINTS = {
        "reviews": "assets/data/reviews.json",
        "reservations": "assets/data/reservations.json",
    }

    def __init__(
        self,
        static_root: Union[str, Path] = ".",
        base_url: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.static_root = Path(static_root)
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def source(self) -> str:
        return self.base_url or str(self.static_root)

    def has_endpoint(self, resource: str) -> bool:
        return resource in self.ENDPOINTS

    async def load(self, resource: str) -> list[dict[str, Any]]:
        """Return the baseline records of resource (empty on any failure)."""
        path = self.ENDPOINTS.get(resource)
        if path is None:
            return []

        if self.base_url:
            data = await self._fetch_remote(resource, path)
        else:
            data = self._read_local(resource, path)

        return _as_record_list(resource, data)

    async def _fetch_remote(self, resource: str, path: str) -> Any:
        url = f"{self.base_url}/{path}"
        try:
            response = await self._get_client().get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.warning(f"Could not fetch static data for {resource}: {e}")
            return None

        if not response.is_success:
            logger.warning(
                f"Could not fetch static data for {resource}: HTTP {response.status_code}"
            )
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"Static data for {resource} is not valid JSON: {e}")
            return None

    def _read_local(self, resource: str, path: str) -> Any:
        file_path = self.static_root / path
        try:
            return json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"Could not fetch static data for {resource}: {file_path} not found")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not fetch static data for {resource}: {e}")
        return None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


def _as_record_list(resource: str, data: Any) -> list[dict[str, Any]]:
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(f"Static data for {resource} is not a list, ignoring it")
        return []
    return [item for item in data if isinstance(item, dict)]
