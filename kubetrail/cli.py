"""
Command-line interface for Kubetrail.

This module provides the command-line interface, handling argument parsing,
input validation, and session startup.

Key Functions:
- build_parser: Create and configure the argument parser
- parse_config: Turn parsed arguments into a validated WatchConfig
- main: Main entry point for the CLI application

Exit codes: 0 after an interrupt, 2 on configuration errors (reported before
any cluster connection is attempted), 1 on connection or runtime errors.

Example:
    ```bash
    kubetrail -n prod --deployments api web --cronjobs nightly -f --filter ERROR
    ```
"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

from .app import run
from .constants import DEFAULT_REFRESH_INTERVAL_SECONDS, ENV_REFRESH_INTERVAL
from .exceptions import ConfigurationError, KubernetesConnectionError
from .log import configure_logging, log
from .models import ResourceKind, WatchConfig
from .validation import build_config


def _env_refresh_interval() -> float:
    try:
        return float(os.getenv(ENV_REFRESH_INTERVAL, str(DEFAULT_REFRESH_INTERVAL_SECONDS)))
    except ValueError:
        log.warning(f"[config] Invalid {ENV_REFRESH_INTERVAL}, using default: {DEFAULT_REFRESH_INTERVAL_SECONDS}")
        return DEFAULT_REFRESH_INTERVAL_SECONDS


def build_parser() -> argparse.ArgumentParser:
    """
    Build and configure the command-line argument parser.

    Environment Variables:
        KUBETRAIL_REFRESH_INTERVAL: Default refresh interval in seconds (default: 30)
        KUBETRAIL_LOG_LEVEL: Log level for diagnostics on stderr (default: INFO)
    """
    p = argparse.ArgumentParser("kubetrail", description="Tail logs from all pods of Kubernetes workloads")
    p.add_argument("-n", "--namespace", required=True, help="Namespace to watch")
    for kind in ResourceKind:
        p.add_argument(f"--{kind.option}", nargs="*", default=[], metavar="NAME",
                       help=f"{kind.value} names whose pods to tail")
    p.add_argument("-p", "--pods", nargs="*", default=[], metavar="NAME", help="Pod names to tail directly")
    p.add_argument("-f", "--follow", action="store_true", help="Follow the log streams")
    p.add_argument("--filter", default="", help="Only print lines containing this substring")
    p.add_argument("--refresh-interval", type=float, default=_env_refresh_interval(),
                   help="Seconds between pod re-discovery, 0 disables (env: KUBETRAIL_REFRESH_INTERVAL)")
    p.add_argument("--pretty-json", action="store_true", help="Render JSON log lines as '[level] ts: msg'")
    p.add_argument("--kubeconfig", default=None, help="Path to kubeconfig (defaults to kube rules)")
    p.add_argument("--context", default=None, help="Kubecontext override")
    return p


def parse_config(argv: Optional[List[str]] = None) -> WatchConfig:
    """
    Parse ``argv`` and validate it into a WatchConfig.

    Raises:
        ConfigurationError: If nothing to watch was specified or a value is invalid
        SystemExit: On argparse usage errors (exit code 2)
    """
    args = build_parser().parse_args(argv)
    return build_config(
        namespace=args.namespace,
        names_by_kind={kind: getattr(args, kind.option) for kind in ResourceKind},
        pods=args.pods,
        follow=args.follow,
        line_filter=args.filter,
        refresh_interval=args.refresh_interval,
        pretty_json=args.pretty_json,
        kubeconfig=args.kubeconfig,
        context=args.context,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the Kubetrail CLI application.

    Raises:
        SystemExit: On configuration errors (exit code 2) or runtime errors (exit code 1)
    """
    # before parsing, so warnings about env defaults get the configured format
    configure_logging()

    try:
        config = parse_config(argv)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
    except KubernetesConnectionError as e:
        print(f"Connection error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
