"""Event filters for watched objects.

Pods, jobs and events are handled as mappings in their API form; the
container image scan resources may also be the dataclasses of
:mod:`imagescanner.types`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from .labels import APP_NAME_IMAGE_SCANNER, LABEL_K8S_APP_MANAGED_BY, parse_group_version
from .types import OwnerReference

JOB_COMPLETE = "Complete"
JOB_FAILED = "Failed"
CONDITION_TRUE = "True"

ObjectFilter = Callable[[Any], bool]


@dataclass(frozen=True)
class Predicate:
    """Decides per kind of event whether it should be handled.

    A missing function lets the event through.
    """

    create_fn: Optional[Callable[[Any], bool]] = None
    update_fn: Optional[Callable[[Any, Any], bool]] = None
    delete_fn: Optional[Callable[[Any], bool]] = None
    generic_fn: Optional[Callable[[Any], bool]] = None

    def create(self, obj: Any) -> bool:
        return True if self.create_fn is None else bool(self.create_fn(obj))

    def update(self, old: Any, new: Any) -> bool:
        return True if self.update_fn is None else bool(self.update_fn(old, new))

    def delete(self, obj: Any) -> bool:
        return True if self.delete_fn is None else bool(self.delete_fn(obj))

    def generic(self, obj: Any) -> bool:
        return True if self.generic_fn is None else bool(self.generic_fn(obj))


def new_predicate_funcs(filter_fn: ObjectFilter) -> Predicate:
    """Apply ``filter_fn`` to the object of every event (the new one on updates)."""
    return Predicate(
        create_fn=filter_fn,
        update_fn=lambda old, new: filter_fn(new),
        delete_fn=filter_fn,
        generic_fn=filter_fn,
    )


def not_(predicate: Predicate) -> Predicate:
    """Invert every decision of ``predicate``."""
    return Predicate(
        create_fn=lambda obj: not predicate.create(obj),
        update_fn=lambda old, new: not predicate.update(old, new),
        delete_fn=lambda obj: not predicate.delete(obj),
        generic_fn=lambda obj: not predicate.generic(obj),
    )


def and_(*args: Predicate) -> Predicate:
    """Let an event through only when all predicates do; no predicates lets all through."""
    predicates = tuple(args)
    return Predicate(
        create_fn=lambda obj: all(p.create(obj) for p in predicates),
        update_fn=lambda old, new: all(p.update(old, new) for p in predicates),
        delete_fn=lambda obj: all(p.delete(obj) for p in predicates),
        generic_fn=lambda obj: all(p.generic(obj) for p in predicates),
    )


def _metadata(obj: Any) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _namespace(obj: Any) -> str:
    if isinstance(obj, Mapping):
        return _metadata(obj).get("namespace", "") or ""
    return obj.metadata.namespace


def _labels(obj: Any) -> Mapping[str, str]:
    if isinstance(obj, Mapping):
        return _metadata(obj).get("labels") or {}
    return obj.metadata.labels or {}


def _uid(obj: Any) -> str:
    if isinstance(obj, Mapping):
        return _metadata(obj).get("uid", "") or ""
    return obj.metadata.uid


def _owner_references(obj: Any) -> list[OwnerReference]:
    if not isinstance(obj, Mapping):
        return list(obj.metadata.owner_references)
    return [
        OwnerReference(
            api_version=ref.get("apiVersion", ""),
            kind=ref.get("kind", ""),
            name=ref.get("name", ""),
            uid=ref.get("uid", ""),
            controller=ref.get("controller"),
            block_owner_deletion=ref.get("blockOwnerDeletion"),
        )
        for ref in _metadata(obj).get("ownerReferences") or []
    ]


def get_controller_of(obj: Any) -> Optional[OwnerReference]:
    """Return the owner reference marked as controller, or None."""
    return next((ref for ref in _owner_references(obj) if ref.controller), None)


def namespace_match_regexp(pattern: Union[str, re.Pattern]) -> Predicate:
    """Let through objects whose namespace contains a match of ``pattern``."""
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return new_predicate_funcs(lambda obj: compiled.search(_namespace(obj)) is not None)


def _container_statuses(pod: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    return (pod.get("status") or {}).get("containerStatuses") or []


def pod_container_status_images_changed() -> Predicate:
    """Let through pods that report images, and updates that change them."""

    def on_create(pod: Mapping[str, Any]) -> bool:
        return len(_container_statuses(pod)) > 0

    def on_update(old: Mapping[str, Any], new: Mapping[str, Any]) -> bool:
        old_statuses = _container_statuses(old)
        new_statuses = _container_statuses(new)
        if len(old_statuses) != len(new_statuses):
            return True
        return any(
            a.get("image") != b.get("image") or a.get("imageID") != b.get("imageID")
            for a, b in zip(old_statuses, new_statuses)
        )

    return Predicate(create_fn=on_create, update_fn=on_update)


def ignore_creation_predicate() -> Predicate:
    """Drop creation events."""
    return Predicate(create_fn=lambda obj: False)


def ignore_deletion_predicate() -> Predicate:
    """Drop deletion events."""
    return Predicate(delete_fn=lambda obj: False)


no_controller = new_predicate_funcs(lambda obj: get_controller_of(obj) is None)


def _group_kind(value: Any) -> tuple[str, str]:
    if hasattr(value, "group") and hasattr(value, "kind"):
        return value.group, value.kind
    group, kind = value
    return group, kind


def controller_in_kinds(*args: Any) -> Predicate:
    """Let through objects controlled by one of the given (group, kind) pairs."""
    group_kinds = {_group_kind(arg) for arg in args}

    def matches(obj: Any) -> bool:
        controller = get_controller_of(obj)
        if controller is None:
            return False
        try:
            group_version = parse_group_version(controller.api_version)
        except ValueError:
            return False
        return (group_version.group, controller.kind) in group_kinds

    return new_predicate_funcs(matches)


def in_namespace_predicate(namespace: str) -> Predicate:
    """Let through objects in ``namespace``."""
    return new_predicate_funcs(lambda obj: _namespace(obj) == namespace)


managed_by_image_scanner = new_predicate_funcs(
    lambda obj: _labels(obj).get(LABEL_K8S_APP_MANAGED_BY) == APP_NAME_IMAGE_SCANNER
)


def job_condition(job: Mapping[str, Any]) -> str:
    """Return the type of the first true condition of ``job``, or an empty string."""
    for condition in (job.get("status") or {}).get("conditions") or []:
        if condition.get("status") == CONDITION_TRUE:
            return condition.get("type", "")
    return ""


def is_job_finished(job: Mapping[str, Any]) -> bool:
    """Whether the job has completed or failed."""
    return job_condition(job) in (JOB_COMPLETE, JOB_FAILED)


job_is_finished = new_predicate_funcs(is_job_finished)

cis_vulnerability_overflow = new_predicate_funcs(
    lambda cis: cis.has_vulnerability_overflow()
)


def event_regarding_kind(kind: str) -> Predicate:
    """Let through events about objects of ``kind``."""
    return new_predicate_funcs(
        lambda event: (event.get("regarding") or {}).get("kind") == kind
    )


def event_reason(reason: str) -> Predicate:
    """Let through events with the given reason."""
    return new_predicate_funcs(lambda event: event.get("reason") == reason)