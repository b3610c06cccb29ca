# datasource/connectors/mimir.py

from config import MIMIR_HEALTH_PATH
from connectors.prometheus import PrometheusConnector


class MimirConnector(PrometheusConnector):
    health_path = MIMIR_HEALTH_PATH
    # Mimir serves the Prometheus API under its own prefix and needs a tenant
    api_prefix = "/prometheus/api/v1"
    display_name = "Mimir"
