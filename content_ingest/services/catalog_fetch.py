"""Catalog API ingestion helpers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import requests

from content_ingest.config.settings import Settings
from content_ingest.errors import ConfigError, SourceResponseError, UnexpectedPayloadError
from content_ingest.services.http import fetch_with_retry

logger = logging.getLogger(__name__)


def fetch_catalog_works(settings: Settings, session: requests.Session | None = None) -> list[dict[str, Any]]:
    """
    Fetch the newest catalog items, page by page.

    Items are returned as raw dicts stamped with ``fetched_at``; validation
    happens in the normalizer so one bad item only skips itself.
    """
    if not settings.catalog_api_id or not settings.catalog_affiliate_id:
        raise ConfigError("CATALOG_API_ID and CATALOG_AFFILIATE_ID are required for the catalog source")

    fetched_at = datetime.now(timezone.utc).isoformat()
    hits = settings.catalog_hits_per_page
    works: list[dict[str, Any]] = []

    for page in range(settings.catalog_max_pages):
        params = {
            "api_id": settings.catalog_api_id,
            "affiliate_id": settings.catalog_affiliate_id,
            "hits": hits,
            "offset": page * hits + 1,
            "sort": "date",
            "output": "json",
        }
        response = fetch_with_retry(
            settings.catalog_api_url,
            policy=settings.retry_policy(),
            session=session,
            params=params,
            headers={"User-Agent": settings.user_agent},
        )
        if not response.ok:
            raise SourceResponseError(settings.catalog_api_url, response.status_code, response.reason or "")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UnexpectedPayloadError(settings.catalog_api_url, "body is not JSON") from exc
        items, total = _parse_catalog_payload(settings.catalog_api_url, payload)
        works.extend({**item, "fetched_at": fetched_at} for item in items)

        logger.info(
            "catalog fetch: page=%s items=%s total_count=%s", page + 1, len(items), total
        )
        if len(items) < hits or (total is not None and len(works) >= total):
            break

    return works


def _parse_catalog_payload(url: str, payload: Any) -> tuple[list[dict[str, Any]], int | None]:
    if not isinstance(payload, dict) or not isinstance(payload.get("result"), dict):
        raise UnexpectedPayloadError(url, "expected {'result': {...}} envelope")

    result = payload["result"]
    items = result.get("items") or []
    if not isinstance(items, list):
        raise UnexpectedPayloadError(url, "'items' is not a list")

    total = result.get("total_count")
    total = int(total) if isinstance(total, (int, str)) and str(total).isdigit() else None
    return [i for i in items if isinstance(i, dict)], total
