"""
Provider bundling the metrics connector with the configured source descriptors.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from .data_config import DataSourceSettings
from .factory import DataSourceFactory

class DataSourceProvider:
    def __init__(self, settings: DataSourceSettings, tenant_id: str = ""):
        self.tenant_id = tenant_id or settings.tenant_id
        self.settings = settings
        self.sources = settings.sources()
        self.metrics = DataSourceFactory.create_metrics(settings, self.tenant_id)
