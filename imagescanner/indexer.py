"""Field indexes over watched objects."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol

from .labels import SCHEME_GROUP_VERSION, GroupVersionKind
from .predicates import JOB_COMPLETE, JOB_FAILED, _owner_references, _uid, job_condition

INDEX_OWNER_UID = ".metadata.owner"
INDEX_UID = ".metadata.uid"
INDEX_JOB_CONDITION = ".status.condition"

JOB_NOT_FINISHED = "NotFinished"

CONTAINER_IMAGE_SCAN_KIND = SCHEME_GROUP_VERSION.with_kind("ContainerImageScan")
JOB_KIND = GroupVersionKind("batch", "v1", "Job")


class FieldIndexer(Protocol):
    def index_field(
        self, kind: GroupVersionKind, field: str, extract: Callable[[Any], list[str]]
    ) -> None: ...


def owner_uid_index(obj: Any) -> list[str]:
    """Return the UIDs of the owners of ``obj``."""
    return [ref.uid for ref in _owner_references(obj)]


def uid_index(obj: Any) -> list[str]:
    """Return the UID of ``obj``."""
    return [_uid(obj)]


def job_condition_index(job: Mapping[str, Any]) -> list[str]:
    """Map a job to Complete, Failed or NotFinished."""
    condition = job_condition(job)
    if condition in (JOB_COMPLETE, JOB_FAILED):
        return [condition]
    return [JOB_NOT_FINISHED]


class Indexer:
    """Registers the field indexes the controllers look objects up by."""

    def setup(self, field_indexer: FieldIndexer) -> None:
        """Register all indexes; errors from the indexer are raised."""
        field_indexer.index_field(CONTAINER_IMAGE_SCAN_KIND, INDEX_OWNER_UID, owner_uid_index)
        field_indexer.index_field(CONTAINER_IMAGE_SCAN_KIND, INDEX_UID, uid_index)
        field_indexer.index_field(JOB_KIND, INDEX_JOB_CONDITION, job_condition_index)