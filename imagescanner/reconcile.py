"""Shared handling of the errors a reconcile step can end with."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Result:
    """Outcome of one reconcile step."""

    requeue: bool = False
    requeue_after: timedelta = timedelta(0)


class ApiError(Exception):
    """An error reported by the cluster API."""


class ConflictError(ApiError):
    """The resource was modified concurrently."""


class AlreadyExistsError(ApiError):
    """The resource to create exists already."""


class NotFoundError(ApiError):
    """The resource does not exist."""


class NamespaceTerminatingError(ApiError):
    """The namespace of the resource is being deleted."""


ReconcileFn = Callable[[Any], Result]


def reconcile(context: Any, reconcile_fn: ReconcileFn) -> Result:
    """Run ``reconcile_fn`` and turn transient API errors into requeues.

    Conflicts and already-existing resources requeue the request; missing
    resources and terminating namespaces are ignored. Any other error is
    raised again.
    """
    try:
        return reconcile_fn(context)
    except ConflictError:
        return Result(requeue=True)
    except AlreadyExistsError as exc:
        _log.warning(
            "Assuming transient error (race condition), requeuing request: %s", exc
        )
        return Result(requeue=True)
    except (NamespaceTerminatingError, NotFoundError):
        return Result()