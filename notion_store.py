"""Notion REST client for the team and challenge databases."""

from typing import Any, Dict, List, Mapping, Optional, Union

import requests
from loguru import logger
from pydantic import ValidationError

import config
from models import Collection, Page


class StoreError(Exception):
    """A Notion request failed in transport, with an HTTP error, or with an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def equals_filter(property_name: str, value: Union[str, int, float]) -> Dict[str, Any]:
    """Build an equality filter: text condition for strings, number condition otherwise."""
    if isinstance(value, str):
        return {"property": property_name, "rich_text": {"equals": value}}
    return {"property": property_name, "number": {"equals": float(value)}}


class NotionStore:
    def __init__(
        self,
        token: str,
        database_ids: Mapping[Collection, str],
        api_url: str = config.NOTION_API_URL,
        notion_version: str = config.NOTION_VERSION,
        timeout: float = config.NOTION_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.database_ids = dict(database_ids)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Notion-Version": notion_version,
            "Content-Type": "application/json",
        })

    # ── low level ─────────────────────────────────────────────────────────
    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.api_url}{path}"
        try:
            resp = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning(f"Notion {method} {path} request error: {exc}")
            raise StoreError(f"Notion {method} {path} failed: {exc}") from exc

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            message = body.get("message") or f"HTTP {resp.status_code}"
            logger.debug(f"Notion {method} {path} failed with status {resp.status_code}: {message}")
            raise StoreError(message, status_code=resp.status_code, code=body.get("code"))

        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(f"Notion {method} {path} returned invalid JSON", status_code=resp.status_code) from exc

    def _database_id(self, collection: Collection) -> str:
        try:
            return self.database_ids[collection]
        except KeyError:
            raise StoreError(f"No database configured for collection {collection.value!r}") from None

    @staticmethod
    def _parse_page(data: Dict[str, Any]) -> Page:
        try:
            return Page.model_validate(data)
        except ValidationError as exc:
            raise StoreError(f"Unexpected page shape: {exc}") from exc

    def _query(self, collection: Collection, payload: Dict[str, Any]) -> List[Page]:
        database_id = self._database_id(collection)
        data = self._request("POST", f"/databases/{database_id}/query", payload)
        return [self._parse_page(item) for item in data.get("results", [])]

    # ── store contract ────────────────────────────────────────────────────
    def query_by_filter(self, collection: Collection, property_name: str, value: Union[str, int, float]) -> List[Page]:
        return self._query(collection, {"filter": equals_filter(property_name, value)})

    def query_all(self, collection: Collection, page_size: int = 100) -> List[Page]:
        # Single page only; records beyond page_size are not fetched.
        return self._query(collection, {"page_size": page_size})

    def get_by_id(self, record_id: str) -> Page:
        return self._parse_page(self._request("GET", f"/pages/{record_id}"))

    def close(self):
        self.session.close()


def create_store() -> NotionStore:
    """Build the store from the environment settings."""
    config.require_notion_settings()
    return NotionStore(
        token=config.NOTION_TOKEN,
        database_ids={
            Collection.TEAMS: config.TEAMS_DB_ID,
            Collection.CHALLENGES: config.CHALLENGES_DB_ID,
        },
    )
