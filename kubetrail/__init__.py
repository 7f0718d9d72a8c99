"""
Kubetrail - Multi-workload Kubernetes log tailing.

Kubetrail streams logs from every pod that belongs to a set of watched
workloads (Deployments, StatefulSets, DaemonSets, Jobs and CronJobs) plus any
explicitly named pods, interleaving the lines on the terminal with a colored
pod prefix.

Key Features:
- Label-selector based pod discovery per workload kind
- Periodic re-discovery so rollouts and scale-ups are picked up
- One isolated streaming task per pod, deduplicated across workloads
- Substring filtering and optional JSON log pretty-printing

Example:
    Follow a deployment and a statefulset:
    ```bash
    kubetrail -n prod --deployments api web --statefulsets db -f
    ```

    Only show matching lines, without periodic refresh:
    ```bash
    kubetrail -n prod --jobs migrate --filter ERROR --refresh-interval 0
    ```
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
