"""
Base connectors for Prometheus-compatible metrics backends

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from config import DATASOURCE_TIMEOUT


class BaseConnector(ABC):
    health_path: str = ""
    api_prefix: str = ""
    display_name: str = "data source"

    def __init__(
        self,
        base_url: str,
        tenant_id: str = "",
        timeout: int = DATASOURCE_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = str(base_url).rstrip("/")
        self.tenant_id = tenant_id
        self.timeout = timeout
        self.headers = headers or {}

    @property
    def health_url(self) -> str:
        if not self.health_path:
            raise NotImplementedError(f"{self.display_name} connector has no health path")
        return f"{self.base_url}{self.health_path}"

    def api_url(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        """Extra headers plus the tenant header for multi-tenant backends."""
        if not self.tenant_id:
            return dict(self.headers)
        return {**self.headers, "X-Scope-OrgID": self.tenant_id}


class MetricsConnector(BaseConnector):
    api_prefix = "/api/v1"

    @abstractmethod
    async def rules(self) -> List[Dict[str, Any]]:
        """Rule groups with their alerting rules and active alerts."""

    @abstractmethod
    async def query_exemplars(self, query: str, start: float, end: float) -> List[Dict[str, Any]]:
        """Series labels and exemplars matched by ``query`` in ``[start, end]``."""
