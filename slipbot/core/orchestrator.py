"""Runs the slip on every enabled exchange and collects the results."""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Protocol, Sequence, Tuple

from config.settings import Settings
from slipbot.api import ExchangeClient, create_client
from slipbot.api.auth import enabled_exchanges
from slipbot.executor.slip_pipeline import SlipPipeline
from slipbot.models import ExchangeName, ExecutionResult, ExecutionSummary

logger = logging.getLogger(__name__)


class Runnable(Protocol):
    def run(self) -> object:
        ...


ClientFactory = Callable[[ExchangeName, Settings], ExchangeClient]


class RunOrchestrator:
    """
    Runs one pipeline per exchange, in order, isolating failures.

    An exception from one exchange is logged and recorded as a failed
    result; the remaining exchanges still run.
    """

    def __init__(
        self,
        pipelines: Sequence[Tuple[ExchangeName, Runnable]],
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """
        Args:
            pipelines: (exchange, pipeline) pairs in run order
            now: Timestamp source for the summary
        """
        self.pipelines = list(pipelines)
        self._now = now

    def run(self) -> ExecutionSummary:
        """
        Run every pipeline.

        Returns:
            ExecutionSummary with one result per pipeline, in run order
            (empty if no exchange is enabled)
        """
        if not self.pipelines:
            logger.info("No exchanges enabled, nothing to run")
            return ExecutionSummary(results=(), timestamp=self._now())

        results: List[ExecutionResult] = []
        for name, pipeline in self.pipelines:
            logger.info(f"[{name.value}] Starting slip")
            try:
                pipeline.run()
                results.append(ExecutionResult(exchange_name=name, success=True))
                logger.info(f"[{name.value}] Finished successfully")
            except Exception as e:
                logger.exception(f"[{name.value}] Failed: {e}")
                results.append(ExecutionResult(exchange_name=name, success=False))

        summary = ExecutionSummary(results=tuple(results), timestamp=self._now())
        logger.info(
            f"Run finished: {len(summary.successful)} succeeded, {len(summary.failed)} failed"
        )
        return summary


def build_pipelines(
    settings: Settings, client_factory: ClientFactory = create_client
) -> Iterator[Tuple[ExchangeName, SlipPipeline]]:
    """
    Create a pipeline for each enabled exchange, in the fixed run order.

    Pairs are yielded one at a time so a caller can release the clients
    already built if a later client_factory call raises.

    Args:
        settings: Full bot settings
        client_factory: Builds the client for an exchange

    Yields:
        (exchange, pipeline) pairs
    """
    for name in enabled_exchanges(settings):
        yield name, SlipPipeline(client_factory(name, settings), settings.slip)
