"""Backend availability and read-only listings.

Health probes do not take the workflow gate: they only touch the
availability fields of the store and may run while a workflow is in flight.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ragclient.application.store import SessionStore
from ragclient.core.schema import HealthResponse
from ragclient.domain import Availability
from ragclient.infrastructure import AsyncGateway, GatewayError

logger = logging.getLogger(__name__)


class HealthMonitor:
    def __init__(self, store: SessionStore, gateway: AsyncGateway) -> None:
        self._store = store
        self._gateway = gateway

    async def refresh(self) -> Availability:
        try:
            body = await self._gateway.probe("health")
        except GatewayError as exc:
            logger.warning("Health probe failed: %s", exc.message)
            self._store.mark_offline()
            return self._store.availability

        try:
            health = HealthResponse.model_validate(body)
        except ValidationError:
            logger.debug("Health payload not understood; marking online without details")
            health = HealthResponse()

        self._store.mark_online(
            vector_db=health.vector_db,
            llm_model=health.llm_model,
            tool_count=len(health.tools) if health.tools is not None else None,
        )
        return self._store.availability

    async def list_sources(self) -> list[str]:
        """Return the sources the backend reports as already ingested."""

        body = await self._gateway.probe("sources")
        return _source_names(body)


def _source_names(body: Any) -> list[str]:
    items = body.get("sources", []) if isinstance(body, dict) else body
    if not isinstance(items, list):
        return []
    names: list[str] = []
    for item in items:
        if isinstance(item, dict):
            value = item.get("url") or item.get("source") or item.get("name")
            if value:
                names.append(str(value))
        elif item is not None:
            names.append(str(item))
    return names
