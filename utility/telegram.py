"""
Telegram Message Sender.

Minimal Bot API client posting text messages to a single chat over HTTPS.

Example:
    >>> telegram = Telegram("<token>", "<chat_id>")
    >>> telegram.send_message("Hello, World!")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests

from .constants import HTTP_TIMEOUT, LOGGER_NAME, TELEGRAM_API_BASE
from .exceptions import TelegramError, UtilityConfigError

logger = logging.getLogger(LOGGER_NAME)


class Telegram:
    """
    Sends messages to one chat through one bot.

    Attributes:
        chat_id (str): Destination chat identifier.
        url (str): ``sendMessage`` endpoint of the bot (contains the token).
        timeout (float): Request timeout in seconds.
    """

    def __init__(
        self,
        token: str,
        chat_id: str,
        *,
        session: requests.Session | None = None,
        base_url: str = TELEGRAM_API_BASE,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        """
        Args:
            token: Bot token issued by BotFather.
            chat_id: Destination chat identifier.
            session: Existing session to reuse; one is created if omitted.
            base_url: Bot API root, must use https.
            timeout: Request timeout in seconds.

        Raises:
            UtilityConfigError: If ``base_url`` is not an https URL.
        """
        if urlsplit(base_url).scheme != "https":
            raise UtilityConfigError(f"Telegram base URL must use https: {base_url}")

        self.chat_id = chat_id
        self.url = f"{base_url.rstrip('/')}/bot{token}/sendMessage"
        self.timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @classmethod
    def with_session(cls, token: str, chat_id: str, session: requests.Session) -> Telegram:
        """Create a sender reusing an already configured session."""
        return cls(token, chat_id, session=session)

    def send_message(self, text: str) -> None:
        """
        Send ``text`` to the configured chat.

        The text is URL-encoded into the query string, so any character is
        allowed.

        Raises:
            TelegramError: On transport failure or a non-2xx response.
        """
        try:
            response = self._session.post(
                self.url,
                params={"chat_id": self.chat_id, "text": text},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            # The URL holds the bot token; keep it out of the message
            status = getattr(e.response, "status_code", None)
            raise TelegramError(
                f"failed to send telegram message to chat {self.chat_id} (status={status})"
            ) from e

        logger.debug("Telegram message sent to chat %s", self.chat_id)

    def close(self) -> None:
        """Close the session if this instance created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> Telegram:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False
