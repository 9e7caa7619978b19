"""Thread-based worker pool that sustains a fixed request concurrency."""

import threading
import time
from typing import Callable, Protocol

from inference_bench.core.cancellation import CancellationToken
from inference_bench.core.exceptions import BenchmarkError
from inference_bench.core.metrics import MetricsCollector
from inference_bench.core.models import ErrorKind, InvocationResult
from inference_bench.logging_config import get_logger

logger = get_logger(__name__)


class InvocationClient(Protocol):
    """Protocol for invocation clients used by workers."""

    def invoke(self, prompt: str, streaming: bool) -> InvocationResult:
        """Perform one inference call."""
        ...

    def close(self) -> None:
        """Release client resources."""
        ...


ClientFactory = Callable[[], InvocationClient]


class WorkerPool:
    """Runs ``worker_count`` independent request loops against one endpoint.

    Every worker owns its own client, created through ``client_factory`` when
    the pool starts, and feeds every result into the shared collector.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        collector: MetricsCollector,
        streaming: bool,
        prompt: str,
        worker_count: int,
    ):
        """Initialize the worker pool.

        Args:
            client_factory: Callable returning a fresh invocation client.
            collector: Metrics collector shared by all workers.
            streaming: Whether workers issue streaming requests.
            prompt: Prompt sent with every request.
            worker_count: Number of concurrent workers.
        """
        if worker_count <= 0:
            raise ValueError(f"worker_count must be positive, got {worker_count}")

        self.client_factory = client_factory
        self.collector = collector
        self.streaming = streaming
        self.prompt = prompt
        self.worker_count = worker_count
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._started = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def start(self, cancellation: CancellationToken) -> None:
        """Create one client per worker and launch the worker threads.

        Raises:
            BenchmarkError: If the pool was already started or a client
                cannot be constructed.
        """
        if self._started:
            raise BenchmarkError("worker pool already started")

        clients: list[InvocationClient] = []
        try:
            for _ in range(self.worker_count):
                clients.append(self.client_factory())
        except Exception as e:
            for client in clients:
                client.close()
            raise BenchmarkError(f"failed to create invocation client: {e}") from e

        self._started = True
        for worker_id, client in enumerate(clients):
            thread = threading.Thread(
                target=self._worker,
                args=(worker_id, client, cancellation),
                name=f"bench-worker-{worker_id}",
                daemon=True,
            )
            self._threads.append(thread)
            thread.start()

        logger.debug(
            "worker_pool_started",
            workers=self.worker_count,
            streaming=self.streaming,
        )

    def stop(self) -> None:
        """Signal all workers to stop and wait for in-flight requests to drain.

        No result is ingested after this method returns. Calling it again is
        a no-op.
        """
        if self._stopped:
            return
        self._stopped = True
        self._stop_event.set()

        for thread in self._threads:
            thread.join()

        logger.debug("worker_pool_drained", workers=len(self._threads))

    def _should_stop(self, cancellation: CancellationToken) -> bool:
        return self._stop_event.is_set() or cancellation.cancelled

    def _worker(
        self,
        worker_id: int,
        client: InvocationClient,
        cancellation: CancellationToken,
    ) -> None:
        """Main worker loop: one request at a time until told to stop."""
        try:
            while not self._should_stop(cancellation):
                # The run deadline only gates starting a request; an in-flight
                # call always completes and is recorded.
                result = self._invoke(worker_id, client)
                self.collector.ingest(result)
        finally:
            client.close()

    def _invoke(self, worker_id: int, client: InvocationClient) -> InvocationResult:
        start_time = time.monotonic()
        try:
            return client.invoke(self.prompt, self.streaming)
        except Exception as e:
            logger.warning(
                "invocation_raised",
                worker_id=worker_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return InvocationResult(
                success=False,
                start_time=start_time,
                end_time=time.monotonic(),
                error_kind=ErrorKind.UNKNOWN.value,
                error_message=str(e),
            )
