"""Container image scan resource types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .labels import SCHEME_GROUP_VERSION
from .vulnerability import Vulnerability

REASON_VULNERABILITY_OVERFLOW = "VulnerabilityOverflow"
REASON_SCAN_REPORT_DECODE_ERROR = "ScanReportDecodeError"
WORKLOAD_ANNOTATION_KEY_IGNORE_UNFIXED = "image-scanner.statnett.no/ignore-unfixed"

CONDITION_RECONCILING = "Reconciling"
CONDITION_STALLED = "Stalled"

_NAME_TOTAL_LENGTH_MAX = 255
_DEFAULT_DOMAIN = "docker.io"
_LEGACY_DEFAULT_DOMAIN = "index.docker.io"
_OFFICIAL_REPO_PREFIX = "library/"

_ALPHANUM = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHANUM}(?:{_SEPARATOR}{_ALPHANUM})*"
_REMOTE_NAME = rf"{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN_NAME = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*"
_IPV6 = r"\[[a-fA-F0-9:]+\]"
_DOMAIN = rf"(?:{_DOMAIN_NAME}|{_IPV6})(?::[0-9]+)?"
_TAG = r"[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"
_NAME = rf"(?:{_DOMAIN}/)?{_REMOTE_NAME}"

_REFERENCE_RE = re.compile(rf"({_NAME})(?::({_TAG}))?(?:@({_DIGEST}))?", re.ASCII)
_ANCHORED_NAME_RE = re.compile(rf"(?:({_DOMAIN})/)?({_REMOTE_NAME})", re.ASCII)
_DIGEST_RE = re.compile(_DIGEST, re.ASCII)
_IDENTIFIER_RE = re.compile(r"[a-f0-9]{64}")
_DIGEST_HEX_LENGTHS = {"sha256": 64, "sha384": 96, "sha512": 128}
_LOWER_HEX_RE = re.compile(r"[a-f0-9]+")


class ReferenceError(ValueError):  # noqa: A001
    """An image reference could not be parsed or is not acceptable."""


@dataclass(frozen=True)
class CanonicalReference:
    """A parsed image reference: repository, optional tag and digest."""

    domain: str
    path: str
    tag: str = ""
    digest: str = ""

    @property
    def name(self) -> str:
        return f"{self.domain}/{self.path}" if self.domain else self.path

    def __str__(self) -> str:
        text = self.name
        if self.tag:
            text += f":{self.tag}"
        if self.digest:
            text += f"@{self.digest}"
        return text


def _validate_digest(digest: str) -> None:
    algorithm, _, hex_part = digest.partition(":")
    expected = _DIGEST_HEX_LENGTHS.get(algorithm)
    if expected is None:
        raise ReferenceError("unsupported digest algorithm")
    if len(hex_part) != expected:
        raise ReferenceError("invalid checksum digest length")
    if not _LOWER_HEX_RE.fullmatch(hex_part):
        raise ReferenceError("invalid checksum digest format")


def _parse_reference(text: str) -> CanonicalReference:
    if not text:
        raise ReferenceError("repository name must have at least one component")
    match = _REFERENCE_RE.fullmatch(text)
    if match is None:
        if _REFERENCE_RE.fullmatch(text.lower()):
            raise ReferenceError("repository name must be lowercase")
        raise ReferenceError("invalid reference format")
    name, tag, digest = match.groups()
    if len(name) > _NAME_TOTAL_LENGTH_MAX:
        raise ReferenceError(
            f"repository name must not be more than {_NAME_TOTAL_LENGTH_MAX} characters"
        )
    name_match = _ANCHORED_NAME_RE.fullmatch(name)
    if name_match is None:
        raise ReferenceError("invalid reference format")
    if digest:
        _validate_digest(digest)
    return CanonicalReference(
        domain=name_match.group(1) or "",
        path=name_match.group(2),
        tag=tag or "",
        digest=digest or "",
    )


def _split_docker_domain(name: str) -> tuple[str, str]:
    slash = name.find("/")
    first = name[:slash] if slash != -1 else ""
    if slash == -1 or (
        not any(char in first for char in ".:")
        and first != "localhost"
        and first.lower() == first
    ):
        domain, remainder = _DEFAULT_DOMAIN, name
    else:
        domain, remainder = first, name[slash + 1:]
    if domain == _LEGACY_DEFAULT_DOMAIN:
        domain = _DEFAULT_DOMAIN
    if domain == _DEFAULT_DOMAIN and "/" not in remainder:
        remainder = _OFFICIAL_REPO_PREFIX + remainder
    return domain, remainder


def parse_named(name: str) -> CanonicalReference:
    """Parse a fully qualified image name, rejecting names that are not canonical."""
    if _IDENTIFIER_RE.fullmatch(name):
        raise ReferenceError(
            f"invalid repository name ({name}), cannot specify 64-byte hexadecimal strings"
        )
    domain, remainder = _split_docker_domain(name)
    remote = remainder.split(":", 1)[0]
    if remote.lower() != remote:
        raise ReferenceError(
            f"invalid reference format: repository name ({remainder}) must be lowercase"
        )
    reference = _parse_reference(f"{domain}/{remainder}")
    if str(reference) != name:
        raise ReferenceError("repository name must be canonical")
    return reference


@dataclass
class Image:
    """An image name together with its content digest."""

    name: str
    digest: str

    def canonical(self) -> CanonicalReference:
        """Return the image reference pinned to the digest."""
        named = parse_named(self.name)
        if not _DIGEST_RE.fullmatch(self.digest):
            raise ReferenceError("invalid digest format")
        return replace(named, digest=self.digest)


@dataclass
class Workload:
    """The workload and container that use an image."""

    group: str = ""
    kind: str = ""
    name: str = ""
    container_name: str = ""


@dataclass
class ScanConfig:
    """Options for scanning an image."""

    min_severity: Optional[str] = None
    ignore_unfixed: Optional[bool] = None


@dataclass
class VulnerabilitySummary:
    """Vulnerability counts by severity and by fix availability."""

    severity_count: Optional[dict[str, int]] = None
    fixed_count: int = 0
    unfixed_count: int = 0


def severity_counts(summary: Optional[VulnerabilitySummary]) -> Optional[dict[str, int]]:
    """Return the severity counts of ``summary``, or None when there is no summary."""
    if summary is None:
        return None
    return summary.severity_count


@dataclass
class Condition:
    """An observation of one aspect of a resource's state."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    observed_generation: int = 0
    last_transition_time: Optional[datetime] = None


def find_status_condition(
    conditions: list[Condition], condition_type: str
) -> Optional[Condition]:
    """Return the condition of the given type, or None."""
    return next((c for c in conditions if c.type == condition_type), None)


def set_status_condition(conditions: list[Condition], condition: Condition) -> bool:
    """Add or update a condition in place; return whether anything changed."""
    existing = find_status_condition(conditions, condition.type)
    if existing is None:
        added = replace(condition)
        if added.last_transition_time is None:
            added.last_transition_time = datetime.now(timezone.utc)
        conditions.append(added)
        return True

    changed = False
    if existing.status != condition.status:
        existing.status = condition.status
        existing.last_transition_time = condition.last_transition_time or datetime.now(
            timezone.utc
        )
        changed = True
    if existing.reason != condition.reason:
        existing.reason = condition.reason
        changed = True
    if existing.message != condition.message:
        existing.message = condition.message
        changed = True
    if existing.observed_generation != condition.observed_generation:
        existing.observed_generation = condition.observed_generation
        changed = True
    return changed


def remove_status_condition(conditions: list[Condition], condition_type: str) -> bool:
    """Remove conditions of the given type in place; return whether any were removed."""
    kept = [c for c in conditions if c.type != condition_type]
    removed = len(kept) != len(conditions)
    conditions[:] = kept
    return removed


@dataclass
class OwnerReference:
    """A reference to an object that owns another."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None


@dataclass
class ObjectMeta:
    """Object metadata."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    generation: int = 0
    resource_version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)


@dataclass
class ContainerImageScanSpec:
    """A resolved container image in use by its owning workload."""

    image: Image = field(default_factory=lambda: Image("", ""))
    scan_config: ScanConfig = field(default_factory=ScanConfig)
    tag: str = ""
    workload: Workload = field(default_factory=Workload)


@dataclass
class ContainerImageScanStatus:
    """Observed state of a container image scan."""

    observed_generation: int = 0
    last_scan_job_uid: str = ""
    last_scan_time: Optional[datetime] = None
    last_successful_scan_time: Optional[datetime] = None
    conditions: list[Condition] = field(default_factory=list)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    vulnerability_summary: Optional[VulnerabilitySummary] = None


@dataclass
class ContainerImageScan:
    """A scan of one container image."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ContainerImageScanSpec = field(default_factory=ContainerImageScanSpec)
    status: ContainerImageScanStatus = field(default_factory=ContainerImageScanStatus)
    api_version: str = str(SCHEME_GROUP_VERSION)
    kind: str = "ContainerImageScan"

    def has_vulnerability_overflow(self) -> bool:
        """Whether the scan is stalled because it found too many vulnerabilities."""
        if self.status.observed_generation != self.metadata.generation:
            return False
        stalled = find_status_condition(self.status.conditions, CONDITION_STALLED)
        if stalled is None:
            return False
        return stalled.reason == REASON_VULNERABILITY_OVERFLOW


@dataclass
class ContainerImageScanList:
    """A list of container image scans."""

    items: list[ContainerImageScan] = field(default_factory=list)
    api_version: str = str(SCHEME_GROUP_VERSION)
    kind: str = "ContainerImageScanList"