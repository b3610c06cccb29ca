"""
PromQL parsing and selector analysis.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.promql.duration import format_duration, parse_duration
from engine.promql.labels import Matcher, MatchOp, SelectorGroup, format_selector
from engine.promql.lexer import ParseError
from engine.promql.parser import parse
from engine.promql.selectors import extract_selector_groups, strip_alert_threshold

__all__ = [
    "Matcher",
    "MatchOp",
    "ParseError",
    "SelectorGroup",
    "extract_selector_groups",
    "format_duration",
    "format_selector",
    "parse",
    "parse_duration",
    "strip_alert_threshold",
]
