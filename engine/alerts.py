"""
Locating a firing alert in the rules listing of a Prometheus API.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from engine.errors import NoActiveInstance, NotFound
from engine.models import AlertQuery

log = logging.getLogger(__name__)

FIRING = "firing"


def _labels(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    return {str(k): str(v) for k, v in raw.items()}


def _is_firing(alert: Any) -> bool:
    if not isinstance(alert, dict):
        return False
    # older Thanos releases omit the state of individual alerts
    return str(alert.get("state") or FIRING).lower() == FIRING


def _find_rule(groups: List[Dict[str, Any]], alert_name: str) -> Optional[Dict[str, Any]]:
    for group in groups:
        if not isinstance(group, dict):
            continue
        for rule in group.get("rules") or []:
            if not isinstance(rule, dict) or rule.get("type") != "alerting":
                continue
            if rule.get("name") == alert_name:
                return rule
    return None


def find_firing_alert(groups: List[Dict[str, Any]], alert_name: str) -> AlertQuery:
    """Pick the first alerting rule named ``alert_name`` and its first firing instance.

    Groups, rules and alerts are scanned in the order the backend returned them.
    """
    rule = _find_rule(groups, alert_name)
    if rule is None:
        raise NotFound(f"no alerting rule named {alert_name!r}")

    firing = [a for a in rule.get("alerts") or [] if _is_firing(a)]
    if not firing:
        raise NoActiveInstance(f"requested alert no longer fires, alertname: {alert_name}")
    if len(firing) > 1:
        log.debug("alert %s has %d firing instances, taking the first", alert_name, len(firing))

    return AlertQuery(
        alert_name=alert_name,
        rule_expression=str(rule.get("query") or ""),
        firing_labels=_labels(firing[0].get("labels")),
    )
