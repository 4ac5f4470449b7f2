"""Main slip bot: wires settings, clients, orchestrator and notifier."""

import logging
from typing import List, Optional, Tuple

from config.settings import Settings
from slipbot.api import create_client
from slipbot.api.auth import enabled_exchanges, validate_credentials
from slipbot.api.exceptions import NotificationDeliveryError
from slipbot.core.orchestrator import ClientFactory, RunOrchestrator, build_pipelines
from slipbot.executor.slip_pipeline import SlipPipeline
from slipbot.models import ExchangeName, ExecutionSummary
from slipbot.notify import LineNotifier, format_summary_message

logger = logging.getLogger(__name__)


class SlipBot:
    """
    Runs one slip pass across the enabled exchanges.

    Lifecycle:
    1. Validate configuration for enabled exchanges (fatal if incomplete)
    2. Build one pipeline per enabled exchange
    3. Run them through the orchestrator
    4. Push the summary, unless nothing ran or LINE is not configured

    Notification failures are logged and never change the run's outcome.
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory = create_client,
        notifier: Optional[LineNotifier] = None,
    ):
        """
        Initialize the bot.

        Args:
            settings: Bot configuration
            client_factory: Builds an exchange client (tests pass fakes)
            notifier: Push notifier (built from settings if LINE is configured)

        Raises:
            ConfigurationError: If an enabled exchange is missing credentials
        """
        validate_credentials(settings)
        self.settings = settings
        self.client_factory = client_factory
        if notifier is None and settings.line.is_configured:
            notifier = LineNotifier(settings.line)
        self.notifier = notifier

    def run(self) -> ExecutionSummary:
        """
        Execute the run and send the notification.

        Returns:
            ExecutionSummary of the run
        """
        self._log_banner()

        pipelines: List[Tuple[ExchangeName, SlipPipeline]] = []
        try:
            # Clients built before a factory error must still be closed
            for pair in build_pipelines(self.settings, self.client_factory):
                pipelines.append(pair)
            summary = RunOrchestrator(pipelines).run()
            if summary.is_empty:
                return summary

            logger.info(f"Summary: {format_summary_message(summary.results)}")
            self._notify(summary)
            return summary
        finally:
            for _, pipeline in pipelines:
                pipeline.client.close()

    def _notify(self, summary: ExecutionSummary) -> None:
        if self.notifier is None:
            logger.warning(
                "LINE notification credentials not configured, skipping notification. "
                "Set LINE_CHANNEL_ACCESS_TOKEN and LINE_USER_ID to enable it."
            )
            return

        try:
            self.notifier.send_summary(summary.results)
        except NotificationDeliveryError as e:
            logger.error(f"Notification failed, run results unaffected: {e}")

    def _log_banner(self) -> None:
        slip = self.settings.slip
        enabled = enabled_exchanges(self.settings)
        logger.info("=" * 60)
        logger.info("Starting slip run")
        logger.info(
            f"Exchanges: {', '.join(name.value for name in enabled) if enabled else 'none'}"
        )
        logger.info(f"Market: {slip.trading_currency}/{slip.quote_currency}")
        logger.info(
            f"Fee rate: {slip.fee_rate} | Target fee cost: {slip.target_fee_cost} | "
            f"Buy offset: {slip.buy_price_offset} | Sell offset: {slip.sell_price_offset}"
        )
        logger.info(
            f"Order timeout: {slip.order_timeout_seconds:.0f}s | "
            f"Poll interval: {slip.poll_interval_seconds}s"
        )
        logger.info("=" * 60)


def create_bot(settings: Settings) -> SlipBot:
    """
    Factory function to create a slip bot.

    Args:
        settings: Bot configuration

    Returns:
        Configured SlipBot instance
    """
    return SlipBot(settings)
