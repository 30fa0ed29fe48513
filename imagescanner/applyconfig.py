"""Declarative apply configuration of a whole container image scan."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from .applyconfig_spec import (
    ContainerImageScanSpecApplyConfiguration,
    ContainerImageScanStatusApplyConfiguration,
    ImageApplyConfiguration,
    ImageScanSpecApplyConfiguration,
    ScanConfigApplyConfiguration,
    VulnerabilityApplyConfiguration,
    VulnerabilitySummaryApplyConfiguration,
    WorkloadApplyConfiguration,
    _format_time,
    _without_unset,
)
from .labels import SCHEME_GROUP_VERSION, GroupVersionKind

CONTAINER_IMAGE_SCAN_KIND = "ContainerImageScan"


@dataclass
class OwnerReferenceApplyConfiguration:
    """Apply configuration of a reference to an owning object."""

    api_version: Optional[str] = None
    kind: Optional[str] = None
    name: Optional[str] = None
    uid: Optional[str] = None
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        return _without_unset(
            {
                "apiVersion": self.api_version,
                "kind": self.kind,
                "name": self.name,
                "uid": self.uid,
                "controller": self.controller,
                "blockOwnerDeletion": self.block_owner_deletion,
            }
        )


@dataclass
class ObjectMetaApplyConfiguration:
    """Apply configuration of object metadata."""

    name: Optional[str] = None
    generate_name: Optional[str] = None
    namespace: Optional[str] = None
    uid: Optional[str] = None
    resource_version: Optional[str] = None
    generation: Optional[int] = None
    creation_timestamp: Optional[datetime] = None
    deletion_timestamp: Optional[datetime] = None
    deletion_grace_period_seconds: Optional[int] = None
    labels: Optional[dict[str, str]] = None
    annotations: Optional[dict[str, str]] = None
    owner_references: list[OwnerReferenceApplyConfiguration] = field(default_factory=list)
    finalizers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result = _without_unset(
            {
                "name": self.name,
                "generateName": self.generate_name,
                "namespace": self.namespace,
                "uid": self.uid,
                "resourceVersion": self.resource_version,
                "generation": self.generation,
                "creationTimestamp": _format_time(self.creation_timestamp),
                "deletionTimestamp": _format_time(self.deletion_timestamp),
                "deletionGracePeriodSeconds": self.deletion_grace_period_seconds,
            }
        )
        if self.labels:
            result["labels"] = dict(self.labels)
        if self.annotations:
            result["annotations"] = dict(self.annotations)
        if self.owner_references:
            result["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        if self.finalizers:
            result["finalizers"] = list(self.finalizers)
        return result


@dataclass
class ContainerImageScanApplyConfiguration:
    """Apply configuration of a container image scan resource."""

    kind: Optional[str] = None
    api_version: Optional[str] = None
    metadata: Optional[ObjectMetaApplyConfiguration] = None
    spec: Optional[ContainerImageScanSpecApplyConfiguration] = None
    status: Optional[ContainerImageScanStatusApplyConfiguration] = None

    def _meta(self) -> ObjectMetaApplyConfiguration:
        if self.metadata is None:
            self.metadata = ObjectMetaApplyConfiguration()
        return self.metadata

    def with_kind(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self.kind = value
        return self

    def with_api_version(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self.api_version = value
        return self

    def with_name(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().name = value
        return self

    def with_generate_name(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().generate_name = value
        return self

    def with_namespace(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().namespace = value
        return self

    def with_uid(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().uid = value
        return self

    def with_resource_version(self, value: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().resource_version = value
        return self

    def with_generation(self, value: int) -> "ContainerImageScanApplyConfiguration":
        self._meta().generation = value
        return self

    def with_creation_timestamp(
        self, value: datetime
    ) -> "ContainerImageScanApplyConfiguration":
        self._meta().creation_timestamp = value
        return self

    def with_deletion_timestamp(
        self, value: datetime
    ) -> "ContainerImageScanApplyConfiguration":
        self._meta().deletion_timestamp = value
        return self

    def with_deletion_grace_period_seconds(
        self, value: int
    ) -> "ContainerImageScanApplyConfiguration":
        self._meta().deletion_grace_period_seconds = value
        return self

    def with_labels(
        self, entries: Mapping[str, str]
    ) -> "ContainerImageScanApplyConfiguration":
        """Merge ``entries`` into the labels, overwriting labels with the same key."""
        meta = self._meta()
        if entries:
            if meta.labels is None:
                meta.labels = {}
            meta.labels.update(entries)
        return self

    def with_annotations(
        self, entries: Mapping[str, str]
    ) -> "ContainerImageScanApplyConfiguration":
        """Merge ``entries`` into the annotations, overwriting those with the same key."""
        meta = self._meta()
        if entries:
            if meta.annotations is None:
                meta.annotations = {}
            meta.annotations.update(entries)
        return self

    def with_owner_references(
        self, *args: OwnerReferenceApplyConfiguration
    ) -> "ContainerImageScanApplyConfiguration":
        """Append copies of the given owner references; None is rejected."""
        meta = self._meta()
        if any(value is None for value in args):
            raise ValueError("nil value passed to WithOwnerReferences")
        meta.owner_references.extend(replace(value) for value in args)
        return self

    def with_finalizers(self, *args: str) -> "ContainerImageScanApplyConfiguration":
        self._meta().finalizers.extend(args)
        return self

    def with_spec(
        self, value: Optional[ContainerImageScanSpecApplyConfiguration]
    ) -> "ContainerImageScanApplyConfiguration":
        self.spec = value
        return self

    def with_status(
        self, value: Optional[ContainerImageScanStatusApplyConfiguration]
    ) -> "ContainerImageScanApplyConfiguration":
        self.status = value
        return self

    def to_dict(self) -> dict[str, Any]:
        result = _without_unset({"kind": self.kind, "apiVersion": self.api_version})
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        if self.spec is not None:
            result["spec"] = self.spec.to_dict()
        if self.status is not None:
            result["status"] = self.status.to_dict()
        return result


def container_image_scan(name: str, namespace: str) -> ContainerImageScanApplyConfiguration:
    """Start an apply configuration for the named container image scan."""
    return (
        ContainerImageScanApplyConfiguration()
        .with_name(name)
        .with_namespace(namespace)
        .with_kind(CONTAINER_IMAGE_SCAN_KIND)
        .with_api_version(str(SCHEME_GROUP_VERSION))
    )


_KIND_FACTORIES: dict[GroupVersionKind, Callable[[], Any]] = {
    SCHEME_GROUP_VERSION.with_kind("ContainerImageScan"): ContainerImageScanApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("ContainerImageScanSpec"): ContainerImageScanSpecApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("ContainerImageScanStatus"): ContainerImageScanStatusApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("Image"): ImageApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("ImageScanSpec"): ImageScanSpecApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("ScanConfig"): ScanConfigApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("Vulnerability"): VulnerabilityApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("VulnerabilitySummary"): VulnerabilitySummaryApplyConfiguration,
    SCHEME_GROUP_VERSION.with_kind("Workload"): WorkloadApplyConfiguration,
}


def for_kind(kind: GroupVersionKind) -> Optional[Any]:
    """Return a new, empty apply configuration for ``kind``, or None if there is none."""
    factory = _KIND_FACTORIES.get(kind)
    return None if factory is None else factory()