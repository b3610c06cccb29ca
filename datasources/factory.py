"""
Factory for creating data source connectors based on configuration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from connectors.mimir import MimirConnector
from connectors.prometheus import PrometheusConnector, ThanosConnector
from engine.sources import with_scheme


class DataSourceFactory:

    @staticmethod
    def create_metrics(config, tenant_id):
        from config import METRICS_BACKEND_MIMIR, METRICS_BACKEND_PROMETHEUS, METRICS_BACKEND_THANOS

        url = with_scheme(config.metrics_internal_url)
        if config.metrics_backend == METRICS_BACKEND_THANOS:
            return ThanosConnector(url, tenant_id, timeout=config.connector_timeout)
        if config.metrics_backend == METRICS_BACKEND_PROMETHEUS:
            return PrometheusConnector(url, tenant_id, timeout=config.connector_timeout)
        if config.metrics_backend == METRICS_BACKEND_MIMIR:
            return MimirConnector(url, tenant_id, timeout=config.connector_timeout)
        raise ValueError("Unsupported metrics backend")
