"""
Prometheus HTTP API connector, used for Prometheus and Thanos Query.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
import logging
from typing import Any, Dict, List

from datasources.base import MetricsConnector
from datasources.exceptions import BadResponse
from datasources.helpers import fetch_json, unwrap_api_response
from config import HEALTH_PATH

log = logging.getLogger(__name__)


class PrometheusConnector(MetricsConnector):
    health_path = HEALTH_PATH
    display_name = "Prometheus"

    async def _get(self, path: str, params: Dict[str, Any], what: str) -> Any:
        payload = await fetch_json(
            self.api_url(path),
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
            invalid_msg=f"{self.display_name} {what} request failed",
            timeout_msg=f"{self.display_name} {what} request timed out",
            unavailable_msg=f"Cannot reach {self.display_name} at",
        )
        return unwrap_api_response(payload, f"{self.display_name} {what}")

    async def rules(self) -> List[Dict[str, Any]]:
        data = await self._get("rules", {"type": "alert"}, "rules")
        groups = data.get("groups") if isinstance(data, dict) else None
        if not isinstance(groups, list):
            raise BadResponse(f"{self.display_name} rules: response has no rule groups")
        log.debug("rules: %d group(s) from %s", len(groups), self.base_url)
        return groups

    async def query_exemplars(self, query: str, start: float, end: float) -> List[Dict[str, Any]]:
        data = await self._get("query_exemplars", {"query": query, "start": start, "end": end}, "exemplars")
        if data is None:
            return []
        if not isinstance(data, list):
            raise BadResponse(f"{self.display_name} exemplars: expected a list of series")
        return data


class ThanosConnector(PrometheusConnector):
    display_name = "Thanos"
