"""
Source descriptors: static per-backend identity.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass

from engine.enums import BackendKind
from engine.errors import ConfigError


def with_scheme(endpoint: str) -> str:
    value = str(endpoint or "").strip().rstrip("/")
    if not value or "://" in value:
        return value
    return f"http://{value}"


@dataclass(frozen=True)
class Source:
    kind: BackendKind
    internal_endpoint: str
    external_endpoint: str

    @property
    def internal_url(self) -> str:
        return with_scheme(self.internal_endpoint)

    @property
    def external_url(self) -> str:
        """Browser-reachable base URL; raises ConfigError when unset."""
        url = with_scheme(self.external_endpoint)
        if not url:
            raise ConfigError(f"{self.kind.value} source has no external endpoint configured")
        return url
