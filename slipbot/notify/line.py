"""LINE Messaging API push notifications."""

import logging
import time
from typing import Callable, Iterable, Optional

import requests

from config.settings import LineSettings
from slipbot.api.auth import mask_secret
from slipbot.api.exceptions import MessageTooLongError, NotificationDeliveryError
from slipbot.models import ExecutionResult
from slipbot.notify.formatter import (
    MAX_MESSAGE_LENGTH,
    format_summary_message,
    validate_message_length,
)

logger = logging.getLogger(__name__)


class LineNotifier:
    """
    Sends execution summaries as LINE push messages.

    One message per run; a failed attempt is retried after a fixed delay,
    with every attempt sharing the same timeout.
    """

    PUSH_ENDPOINT = "https://api.line.me/v2/bot/message/push"

    def __init__(
        self,
        settings: LineSettings,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            settings: LINE credentials and retry policy
            session: HTTP session (tests pass a fake)
            sleep: Delay function, injectable for tests
        """
        self.settings = settings
        self.session = session or requests.Session()
        self._sleep = sleep

    def send_summary(self, results: Iterable[ExecutionResult]) -> str:
        """
        Format results and push them as one message.

        Args:
            results: Execution results in run order

        Returns:
            The message text that was sent

        Raises:
            MessageTooLongError: If the message exceeds the length limit
            NotificationDeliveryError: If every attempt fails
        """
        results = list(results)
        logger.info(f"Preparing notification for {len(results)} execution result(s)")

        message = format_summary_message(results)
        logger.info(f'Formatted message: "{message}"')

        if not validate_message_length(message):
            logger.error(
                f"Message exceeds {MAX_MESSAGE_LENGTH} character limit: {len(message)} characters"
            )
            raise MessageTooLongError(len(message), MAX_MESSAGE_LENGTH)

        self.send_with_retry(message)
        logger.info("Notification sent successfully")
        return message

    def send_with_retry(self, message: str) -> None:
        """
        Push a message, retrying up to ``max_retries`` times.

        Raises:
            NotificationDeliveryError: Chained to the last failure
        """
        max_attempts = self.settings.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            try:
                logger.info(f"Attempt {attempt}/{max_attempts}: sending notification")
                self._push(message)
                return
            except requests.RequestException as e:
                status = getattr(getattr(e, "response", None), "status_code", None)
                logger.error(f"Attempt {attempt} failed: {e} (status={status})")

                if attempt == max_attempts:
                    logger.error(
                        f"All attempts exhausted. endpoint={self.PUSH_ENDPOINT} "
                        f"token={mask_secret(self.settings.channel_access_token, 10)} "
                        f"to={self.settings.user_id} text={message!r}"
                    )
                    raise NotificationDeliveryError(
                        f"LINE push failed after {max_attempts} attempt(s): {e}"
                    ) from e

                logger.info(f"Waiting {self.settings.retry_delay_seconds}s before retry...")
                self._sleep(self.settings.retry_delay_seconds)

    def _push(self, message: str) -> None:
        response = self.session.post(
            self.PUSH_ENDPOINT,
            json={
                "to": self.settings.user_id,
                "messages": [{"type": "text", "text": message}],
            },
            headers={
                "Authorization": f"Bearer {self.settings.channel_access_token}",
                "Content-Type": "application/json",
            },
            timeout=self.settings.timeout_seconds,
        )
        # raise_for_status covers 4xx/5xx; anything else non-2xx is also a failure
        response.raise_for_status()
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(
                f"Unexpected LINE response status {response.status_code}", response=response
            )
        logger.info(f"LINE API response: {response.status_code}")
