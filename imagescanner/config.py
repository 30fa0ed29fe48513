"""Operator configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

_UNIT_SECONDS = {
    "ns": Decimal("1e-9"),
    "us": Decimal("1e-6"),
    "µs": Decimal("1e-6"),
    "μs": Decimal("1e-6"),
    "ms": Decimal("1e-3"),
    "s": Decimal(1),
    "m": Decimal(60),
    "h": Decimal(3600),
}
_UNITS = "ns|us|µs|μs|ms|s|m|h"
_NUMBER = r"(?:\d+\.?\d*|\.\d+)"
_DURATION_RE = re.compile(rf"([-+]?)((?:{_NUMBER}(?:{_UNITS}))+)")
_COMPONENT_RE = re.compile(rf"({_NUMBER})({_UNITS})")


def _to_duration(value: Any) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if not isinstance(value, str):
        raise TypeError(f"cannot use {value!r} as a duration")
    if value in ("0", "+0", "-0"):
        return timedelta(0)
    match = _DURATION_RE.fullmatch(value)
    if match is None:
        raise ValueError(f'time: invalid duration "{value}"')
    seconds = sum(
        (Decimal(number) * _UNIT_SECONDS[unit] for number, unit in _COMPONENT_RE.findall(match.group(2))),
        Decimal(0),
    )
    if match.group(1) == "-":
        seconds = -seconds
    return timedelta(microseconds=int(seconds * 1_000_000))


def _to_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",") if value else []
    return [str(item) for item in value]


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"cannot use {value!r} as an integer")
    if isinstance(value, str) and not value:
        return 0
    return int(value)


def _to_regexp(value: Any) -> Optional[re.Pattern]:
    if value is None or isinstance(value, re.Pattern):
        return value
    try:
        return re.compile(value)
    except re.error as exc:
        raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc


_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "cis-metrics-labels": ("metrics_labels", _to_list),
    "scan-interval": ("scan_interval", _to_duration),
    "scan-job-namespace": ("scan_job_namespace", _to_str),
    "scan-job-service-account": ("scan_job_service_account", _to_str),
    "namespaces": ("scan_namespaces", _to_list),
    "scan-namespace-exclude-regexp": ("scan_namespace_exclude_regexp", _to_regexp),
    "scan-namespace-include-regexp": ("scan_namespace_include_regexp", _to_regexp),
    "scan-workload-resources": ("scan_workload_resources", _to_list),
    "trivy-image": ("trivy_image", _to_str),
    "active-scan-job-limit": ("active_scan_job_limit", _to_int),
}


@dataclass
class Config:
    """Settings that drive scanning."""

    metrics_labels: list[str] = field(default_factory=list)
    scan_interval: timedelta = timedelta(0)
    scan_job_namespace: str = ""
    scan_job_service_account: str = ""
    scan_namespaces: list[str] = field(default_factory=list)
    scan_namespace_exclude_regexp: Optional[re.Pattern] = None
    scan_namespace_include_regexp: Optional[re.Pattern] = None
    scan_workload_resources: list[str] = field(default_factory=list)
    trivy_image: str = ""
    active_scan_job_limit: int = 0

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Config":
        """Build a configuration from option names such as ``scan-interval``.

        Unknown keys are ignored.
        """
        kwargs = {}
        for key, value in values.items():
            entry = _FIELDS.get(key)
            if entry is None:
                continue
            attribute, convert = entry
            kwargs[attribute] = convert(value)
        return cls(**kwargs)