"""Label keys, application names and the API group version of the scan resources."""

from __future__ import annotations

from dataclasses import dataclass

LABEL_K8S_APP_NAME = "app.kubernetes.io/name"
LABEL_K8S_APP_MANAGED_BY = "app.kubernetes.io/managed-by"
LABEL_STATNETT_CONTROLLER_NAMESPACE = "controller.statnett.no/namespace"
LABEL_STATNETT_CONTROLLER_UID = "controller.statnett.no/uid"
LABEL_STATNETT_WORKLOAD_KIND = "workload.statnett.no/kind"
LABEL_STATNETT_WORKLOAD_NAME = "workload.statnett.no/name"
LABEL_STATNETT_WORKLOAD_NAMESPACE = "workload.statnett.no/namespace"

APP_NAME_IMAGE_SCANNER = "image-scanner"
APP_NAME_TRIVY = "trivy"


@dataclass(frozen=True)
class GroupVersionKind:
    """An API group, version and kind."""

    group: str
    version: str
    kind: str

    @property
    def group_version(self) -> "GroupVersion":
        return GroupVersion(self.group, self.version)


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version."""

    group: str
    version: str

    def with_kind(self, kind: str) -> GroupVersionKind:
        """Return the group version kind for ``kind`` in this group version."""
        return GroupVersionKind(self.group, self.version, kind)

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


SCHEME_GROUP_VERSION = GroupVersion(group="stas.statnett.no", version="v1alpha1")


def parse_group_version(api_version: str) -> GroupVersion:
    """Split an ``apiVersion`` string into its group and version."""
    if not api_version or api_version == "/":
        return GroupVersion("", "")
    parts = api_version.split("/")
    if len(parts) == 1:
        return GroupVersion("", parts[0])
    if len(parts) == 2:
        return GroupVersion(parts[0], parts[1])
    raise ValueError(f"unexpected GroupVersion string: {api_version}")