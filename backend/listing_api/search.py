from __future__ import annotations

import json
import logging
from typing import Any

import requests

from listing_api.exceptions import SearchError

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("title", "description", "location")
MAX_RESULTS = 20
MAX_TYPOS = 1


class SearchIndex:
    """
    Thin client for a Typesense collection of property documents.

    The index only holds the id and the searchable text fields. Callers
    resolve the ranked ids against the catalog, so counters and other fields
    are always read live.

    https://typesense.org/docs/latest/api/search.html
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        collection: str,
        timeout: float = 10.0,
        http: requests.Session | None = None,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._collection = collection
        self._timeout = timeout
        self._http = http or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self._base_url and self._api_key)

    def _headers(self) -> dict[str, str]:
        return {"X-TYPESENSE-API-KEY": self._api_key, "Accept": "application/json"}

    def _collection_url(self) -> str:
        return f"{self._base_url}/collections/{self._collection}"

    def _documents_url(self, suffix: str = "") -> str:
        return f"{self._collection_url()}/documents{suffix}"

    def collection_schema(self) -> dict[str, Any]:
        return {
            "name": self._collection,
            "fields": [{"name": f, "type": "string", "optional": True} for f in SEARCH_FIELDS],
        }

    def ensure_collection(self) -> bool:
        """
        Create the collection unless it already exists. Returns True when it
        was created, i.e. the index starts out empty.
        """
        if not self.enabled:
            return False
        try:
            resp = self._http.get(self._collection_url(), headers=self._headers(), timeout=self._timeout)
            if resp.status_code == 200:
                return False
            if resp.status_code != 404:
                raise SearchError(f"Collection lookup failed: HTTP {resp.status_code}: {resp.text[:200]}")
            resp = self._http.post(
                f"{self._base_url}/collections",
                headers={**self._headers(), "Content-Type": "application/json"},
                data=json.dumps(self.collection_schema()),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise SearchError(f"Collection setup failed: {e}") from e
        # 409: created concurrently by another worker.
        if resp.status_code == 409:
            return False
        if not (200 <= int(resp.status_code) < 300):
            raise SearchError(f"Collection create failed: HTTP {resp.status_code}: {resp.text[:200]}")
        logger.info("Created search collection %s", self._collection)
        return True

    def search(self, q: str) -> list[int]:
        """
        Prefix + typo-tolerant match over title, description and location.
        Returns property ids in the index's ranking order.
        """
        q = (q or "").strip()
        if not q:
            return []
        if not self.enabled:
            raise SearchError("Search index is not configured")

        params = {
            "q": q,
            "query_by": ",".join(SEARCH_FIELDS),
            "prefix": "true",
            "num_typos": str(MAX_TYPOS),
            "per_page": str(MAX_RESULTS),
            "include_fields": "id",
        }
        try:
            resp = self._http.get(
                self._documents_url("/search"),
                params=params,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise SearchError(f"Search request failed: {e}") from e
        if not (200 <= int(resp.status_code) < 300):
            raise SearchError(f"Search failed: HTTP {resp.status_code}: {resp.text[:500]}")
        try:
            hits = resp.json().get("hits") or []
        except ValueError as e:
            raise SearchError("Search response was not JSON") from e

        ids: list[int] = []
        for hit in hits[:MAX_RESULTS]:
            raw = (hit.get("document") or {}).get("id")
            try:
                ids.append(int(raw))
            except (TypeError, ValueError):
                logger.warning("Skipping search hit with id=%r", raw)
        return ids

    def index_property(self, doc: dict[str, Any]) -> None:
        """
        Upsert the searchable fields of one property. Failures are logged,
        never raised: the catalog stays the source of truth.
        """
        if not self.enabled:
            return
        body: dict[str, Any] = {"id": str(doc["id"])}
        for field in SEARCH_FIELDS:
            if doc.get(field) is not None:
                body[field] = doc[field]
        try:
            resp = self._http.post(
                self._documents_url(),
                params={"action": "upsert"},
                headers={**self._headers(), "Content-Type": "application/json"},
                data=json.dumps(body),
                timeout=self._timeout,
            )
        except requests.RequestException:
            logger.exception("Search indexing failed property_id=%s", doc.get("id"))
            return
        if not (200 <= int(resp.status_code) < 300):
            logger.warning(
                "Search indexing rejected property_id=%s: HTTP %s: %s",
                doc.get("id"),
                resp.status_code,
                resp.text[:200],
            )
