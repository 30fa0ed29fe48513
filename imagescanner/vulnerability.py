"""Detected vulnerabilities and their severities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable


class Severity(IntEnum):
    """Vulnerability severity, ordered from least to most severe."""

    UNKNOWN = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @classmethod
    def parse(cls, name: str) -> "Severity":
        """Return the severity called ``name``; raise ValueError if there is none."""
        try:
            return cls[name]
        except (KeyError, TypeError):
            raise ValueError(f"unknown severity: {name}") from None

    def __str__(self) -> str:
        return self.name


MIN_SEVERITY = Severity.UNKNOWN
MAX_SEVERITY = Severity.CRITICAL
SEVERITY_NAMES = tuple(severity.name for severity in Severity)


@dataclass
class Vulnerability:
    """Details of a vulnerability detected in an image."""

    vulnerability_id: str
    pkg_name: str
    installed_version: str
    severity: str
    pkg_path: str = ""
    fixed_version: str = ""
    title: str = ""
    primary_url: str = ""


def new_severity(name: str) -> Severity:
    """Return the severity called ``name``; raise ValueError if there is none."""
    return Severity.parse(name)


def _rank(name: str) -> Severity:
    try:
        return Severity.parse(name)
    except ValueError:
        return Severity.UNKNOWN


def compare_severity_string(sev1: str, sev2: str) -> int:
    """Return a positive number when ``sev2`` is more severe than ``sev1``.

    Names that are not severities count as UNKNOWN.
    """
    return int(_rank(sev2)) - int(_rank(sev1))


def severity_sort_key(vulnerability: Vulnerability) -> tuple:
    """Key ordering by descending severity, then package, version and id."""
    return (
        -int(_rank(vulnerability.severity)),
        vulnerability.pkg_name,
        vulnerability.installed_version,
        vulnerability.vulnerability_id,
    )


def sort_by_severity(vulnerabilities: Iterable[Vulnerability]) -> list[Vulnerability]:
    """Return the vulnerabilities sorted most severe first."""
    return sorted(vulnerabilities, key=severity_sort_key)