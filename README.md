# imagescanner

Building blocks for an operator that scans container images for known
vulnerabilities. The package models the `ContainerImageScan` resource of the
`stas.statnett.no/v1alpha1` API group and the logic around it. It has no
runtime dependencies.

## Modules

- `imagescanner.vulnerability`: the `Severity` enum (`UNKNOWN` to
  `CRITICAL`, with `Severity.parse`), the `Vulnerability` dataclass,
  `new_severity`, `compare_severity_string` (unknown names count as
  `UNKNOWN`), `severity_sort_key` and `sort_by_severity`. The last sorts
  findings most severe first, then by package name, installed version and
  vulnerability ID.
- `imagescanner.labels`: well-known label keys and application names,
  `GroupVersion`, `GroupVersionKind`, `SCHEME_GROUP_VERSION` and
  `parse_group_version`.
- `imagescanner.types`: the scan resource (`ContainerImageScan`,
  `ContainerImageScanSpec`, `ContainerImageScanStatus`,
  `ContainerImageScanList`), `Image`, `Workload`, `ScanConfig`,
  `VulnerabilitySummary`, `Condition`, `ObjectMeta` and `OwnerReference`.
  - `parse_named` parses a fully qualified image name and raises
    `ReferenceError` for names that are not canonical.
  - `Image.canonical` returns a `CanonicalReference` pinned to the digest.
  - `ContainerImageScan.has_vulnerability_overflow` reports whether a scan
    stalled because it found too many vulnerabilities.
  - The condition helpers are `find_status_condition`,
    `set_status_condition` and `remove_status_condition`.
- `imagescanner.config`: the `Config` dataclass. `Config.from_mapping`
  builds it from option names such as `scan-interval` (a duration like
  `"12h"` or `"1h30m"`), `namespaces`, `scan-namespace-include-regexp` and
  `active-scan-job-limit`. Unknown keys are ignored.
- `imagescanner.reconcile`: `reconcile(context, reconcile_fn)` runs a
  reconcile step and handles the API errors it raises:
  - `ConflictError` and `AlreadyExistsError` become `Result(requeue=True)`.
  - `NotFoundError` and `NamespaceTerminatingError` become an empty
    `Result()`.
  - Any other exception is raised again.
- `imagescanner.predicates`: `Predicate` event filters and ways to combine
  them (`new_predicate_funcs`, `not_`, `and_`). The filters are:
  - by namespace: `namespace_match_regexp`, `in_namespace_predicate`;
  - by owner: `controller_in_kinds`, `no_controller`;
  - by label: `managed_by_image_scanner`;
  - by event kind: `ignore_creation_predicate`, `ignore_deletion_predicate`;
  - for pods: `pod_container_status_images_changed`;
  - for jobs: `job_is_finished`;
  - for events: `event_regarding_kind`, `event_reason`;
  - for scans: `cis_vulnerability_overflow`.

  Pods, jobs and events are plain mappings in their API form. For those it
  also provides `get_controller_of`, `job_condition` and `is_job_finished`.
- `imagescanner.indexer`: the index functions `owner_uid_index`,
  `uid_index` and `job_condition_index`. The last maps a job to `Complete`,
  `Failed` or `NotFinished`. `Indexer.setup(field_indexer)` registers all
  three through the indexer's `index_field(kind, field, extract)` method.
- `imagescanner.applyconfig_spec` and `imagescanner.applyconfig`: chainable
  `with_*` builders for server-side apply documents. Each builder has a
  `to_dict` method that leaves out unset fields. `container_image_scan(name,
  namespace)` starts a complete resource. `for_kind` returns an empty
  builder for a `GroupVersionKind`, or `None` for a kind it does not know.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Example

```python
from imagescanner.vulnerability import Vulnerability, sort_by_severity
from imagescanner.applyconfig import container_image_scan
from imagescanner.applyconfig_spec import ContainerImageScanSpecApplyConfiguration

findings = sort_by_severity([
    Vulnerability("CVE-2023-0001", "openssl", "3.0.1", "LOW"),
    Vulnerability("CVE-2023-0002", "zlib", "1.2.11", "CRITICAL"),
])
print([v.severity for v in findings])  # ['CRITICAL', 'LOW']

spec = ContainerImageScanSpecApplyConfiguration().with_tag("1.25")
doc = container_image_scan("nginx", "default").with_spec(spec).to_dict()
print(doc["apiVersion"])  # stas.statnett.no/v1alpha1
```

## What this package does not do

This is a library, not a running operator. It has none of the following:

- a command to start;
- a cluster client;
- a controller loop;
- code that creates scan jobs or reads scan reports.

Callers supply the reconcile step passed to `reconcile` and the field
indexer passed to `Indexer.setup`. They also send the documents produced
by the apply configurations to a cluster themselves.