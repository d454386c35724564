"""
Elasticsearch store over HTTP (httpx).

Implements ``FieldStore`` with four REST calls:

    introspect_field_mappings  GET    /{pattern}/_mapping/field/*
    get_document               GET    /{index}/_source/{key}
    put_document               PUT    /{index}/_doc/{key}?refresh=wait_for
    delete_document            DELETE /{index}/_doc/{key}

The first write to an index creates it with the root mapping disabled, so
cached tables are stored in ``_source`` without adding a field mapping per
cached field name. An index that already exists is left as it is.

A 404 becomes ``StoreNotFoundError``; any other non-2xx status or
``httpx.HTTPError`` becomes ``TransportError`` with the URL and status in
its context. No call is retried.

Examples:
    >>> async with ElasticsearchStore("http://localhost:9200") as store:
    ...     mapper = Mapper(store)
    ...     table = await mapper.get_fields(Source("logs-*"))

Tags:
    storage, elasticsearch, httpx, async, fieldspine
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from fieldspine.core.errors import (
    ConfigError,
    MappingParseError,
    StoreNotFoundError,
    TransportError,
)
from fieldspine.core.logging import get_logger
from fieldspine.core.settings import FieldSpineSettings, get_settings
from fieldspine.mapping.conflicts import flatten_field_mapping_payload

log = get_logger(__name__)

CACHE_INDEX_BODY = {"mappings": {"enabled": False}}


class ElasticsearchStore:
    """``FieldStore`` backed by an Elasticsearch cluster.

    Args:
        url: Cluster base URL (default: ``settings.store_url``)
        timeout: Request timeout in seconds (default: ``settings.request_timeout``)
        client: Pre-built ``httpx.AsyncClient``; when given, the store does
            not close it
        settings: Settings instance (default: ``get_settings()``)
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        settings: FieldSpineSettings | None = None,
    ):
        settings = settings or get_settings()
        base_url = url if url is not None else settings.store_url
        if client is None and not base_url:
            raise ConfigError("store_url is required for ElasticsearchStore")

        self._prepared: set[str] = set()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> ElasticsearchStore:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # FieldStore
    # ------------------------------------------------------------------ #

    async def introspect_field_mappings(self, pattern: str) -> dict[str, dict[str, str]]:
        path = f"/{_quote(pattern)}/_mapping/field/*"
        response = await self._request(
            "GET",
            path,
            params={"allow_no_indices": "false", "ignore_unavailable": "false"},
        )
        return flatten_field_mapping_payload(_json(response, path))

    async def get_document(self, index: str, key: str) -> dict[str, Any]:
        path = f"/{_quote(index)}/_source/{_quote(key)}"
        response = await self._request("GET", path)
        return _json(response, path)

    async def put_document(self, index: str, key: str, document: dict[str, Any]) -> None:
        await self._ensure_index(index)
        path = f"/{_quote(index)}/_doc/{_quote(key)}"
        await self._request("PUT", path, params={"refresh": "wait_for"}, json=document)

    async def delete_document(self, index: str, key: str) -> None:
        path = f"/{_quote(index)}/_doc/{_quote(key)}"
        try:
            await self._request("DELETE", path)
        except StoreNotFoundError:
            log.debug("document_already_absent", index=index, key=key)

    # ------------------------------------------------------------------ #

    async def _ensure_index(self, index: str) -> None:
        if index in self._prepared:
            return
        path = f"/{_quote(index)}"
        response = await self._request("PUT", path, json=CACHE_INDEX_BODY, allow_status=(400,))
        if response.status_code == 400:
            error_type = _error_type(response)
            if error_type != "resource_already_exists_exception":
                raise TransportError(
                    f"PUT {path} returned 400: {error_type or response.text[:200]}"
                ).with_context(url=path, index=index, http_status=400)
        else:
            log.info("cache_index_created", index=index)
        self._prepared.add(index)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        allow_status: tuple[int, ...] = (),
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            log.warning("store_request_failed", method=method, url=path, error=str(exc))
            raise TransportError(f"{method} {path} failed: {exc}", cause=exc).with_context(
                url=path
            ) from exc

        if response.status_code in allow_status:
            return response
        if response.status_code == 404:
            raise StoreNotFoundError(f"{method} {path} returned 404").with_context(
                url=path, http_status=404
            )
        if response.is_error:
            log.warning(
                "store_request_rejected",
                method=method,
                url=path,
                http_status=response.status_code,
            )
            raise TransportError(
                f"{method} {path} returned {response.status_code}: {response.text[:200]}"
            ).with_context(url=path, http_status=response.status_code)
        return response


def _quote(segment: str) -> str:
    return quote(segment, safe="*,-_.")


def _error_type(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    error = body.get("error") if isinstance(body, dict) else None
    return error.get("type") if isinstance(error, dict) else None


def _json(response: httpx.Response, path: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MappingParseError(f"{path} returned invalid JSON", cause=exc).with_context(
            url=path
        ) from exc


__all__ = ["ElasticsearchStore"]
