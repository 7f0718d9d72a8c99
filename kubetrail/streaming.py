"""
Per-pod log streaming tasks.

``StreamSupervisor.start`` launches one asyncio task per pod. Each task opens
the pod's log stream in the configured namespace, keeps the lines that pass
the substring filter, and prints them through the ``LinePrinter``.

Tasks are isolated: a failing stream is logged with the pod name and ends
only its own task. Tasks are never restarted and are not joined on shutdown.
The supervisor holds a reference to each running task only so the event loop
does not garbage-collect it mid-stream.
"""

import asyncio
import logging
from typing import FrozenSet, Set

from .exceptions import StreamError
from .formatting import LinePrinter, line_matches
from .kube import ClusterClient
from .log import log, log_exception


class StreamSupervisor:
    """
    Starts isolated log streaming tasks.

    Attributes:
        namespace: Namespace every stream is opened in
        follow: Follow streams instead of reading to the current end
        line_filter: Substring a line must contain to be printed
    """

    def __init__(self, cluster: ClusterClient, printer: LinePrinter, namespace: str,
                 follow: bool = False, line_filter: str = ""):
        self.cluster = cluster
        self.printer = printer
        self.namespace = namespace
        self.follow = follow
        self.line_filter = line_filter
        self._tasks: Set[asyncio.Task] = set()

    @property
    def tasks(self) -> FrozenSet[asyncio.Task]:
        """Streaming tasks that have not finished yet."""
        return frozenset(self._tasks)

    def start(self, pod_name: str) -> asyncio.Task:
        """Launch the streaming task for ``pod_name`` and return it without waiting."""
        task = asyncio.get_running_loop().create_task(self._stream(pod_name), name=f"stream:{pod_name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _stream(self, pod_name: str) -> None:
        log.info(f"[stream] pod={pod_name} starting (follow={self.follow})")
        lines = 0
        try:
            async for line in self.cluster.stream_pod_logs(pod_name, self.namespace, self.follow, self.line_filter):
                if line_matches(line, self.line_filter):
                    self.printer.emit(pod_name, line)
                    lines += 1
        except StreamError as e:
            log_exception(f"[stream] pod={pod_name} log stream failed", e)
        except Exception as e:
            log_exception(f"[stream] pod={pod_name} unexpected error", e, level=logging.ERROR)
        else:
            log.info(f"[stream] pod={pod_name} ended after {lines} lines")
