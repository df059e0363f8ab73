"""
Local-path scheduling policy package.

Modules:
- config: node path configuration snapshots, parsing, eligibility lookups
- store: thread-safe holder for the current configuration snapshot
- source: ConfigMap coordinates and the Kubernetes client used to fetch them
- framework: decisions, node snapshots and extension-point interfaces
- policy: the PreFilter/Filter/Score/Reserve plugin
- extender: kube-scheduler HTTP extender surface
- settings: environment-driven service settings
"""
