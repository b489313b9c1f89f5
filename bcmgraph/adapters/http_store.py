"""Record store backed by the bcmstore HTTP API."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from bcmgraph.adapters.store import StoreError
from bcmgraph.models.diagram import DiagramSnapshot
from bcmgraph.models.entities import EntityBundle
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationSet,
    ResourceDependency,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpStore:
    """Talks to the store server over HTTP.

    Usage:
        async with HttpStore("http://localhost:8000") as store:
            entities = await store.load_entities()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the store server
            timeout: HTTP request timeout in seconds
            client: pre-built async client (e.g. with a test transport);
                    the store does not close a client it did not create
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> HttpStore:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"/api{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {url} failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise StoreError(
                f"Failed to connect to store at {self.base_url}: {e}"
            ) from e
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    async def _load(
        self,
        path: str,
        model: type[ModelT],
        nullable: bool = False,
        **kwargs: Any,
    ) -> ModelT | None:
        response = await self._request("GET", path, **kwargs)
        try:
            data = response.json()
            if nullable and not data:
                return None
            return model.model_validate(data)
        except ValueError as e:
            # covers both undecodable JSON and pydantic validation errors
            raise StoreError(f"GET /api{path} returned an unreadable body: {e}") from e

    async def load_entities(self) -> EntityBundle:
        return await self._load("/entities", EntityBundle)

    async def load_relations(self, focal_process_id: str | None = None) -> RelationSet:
        params = {"process_id": focal_process_id} if focal_process_id else None
        return await self._load("/relations", RelationSet, params=params)

    async def load_diagram(self, process_id: str) -> DiagramSnapshot | None:
        return await self._load(
            "/diagrams", DiagramSnapshot, nullable=True, params={"process_id": process_id}
        )

    async def save_diagram(self, snapshot: DiagramSnapshot) -> None:
        await self._request("POST", "/diagrams", json=snapshot.model_dump(mode="json"))

    async def create_process_dependency(self, dependency: ProcessDependency) -> None:
        await self._request("POST", "/dependencies", json=dependency.model_dump(mode="json"))

    async def remove_process_dependency(self, dependency_id: str) -> None:
        await self._request("DELETE", f"/dependencies/{dependency_id}")

    async def create_resource_link(self, link: ProcessResourceLink) -> None:
        await self._request("POST", "/process-resource-links", json=link.model_dump(mode="json"))

    async def remove_resource_link(self, link_id: str) -> None:
        await self._request("DELETE", f"/process-resource-links/{link_id}")

    async def create_resource_dependency(self, dependency: ResourceDependency) -> None:
        await self._request(
            "POST", "/resource-dependencies", json=dependency.model_dump(mode="json")
        )

    async def remove_resource_dependency(self, dependency_id: str) -> None:
        await self._request("DELETE", f"/resource-dependencies/{dependency_id}")

    def __repr__(self) -> str:
        return f"HttpStore(base_url={self.base_url!r})"
