"""Localized player-facing messages and their delivery."""

from __future__ import annotations

import logging
import threading
from enum import IntEnum
from typing import Protocol

from siege_limit.models import Actor


class Lang:
    BOMB_DEPLOY_RESTRICTED = "BombDeployRestricted"
    BOMB_DEPLOY_CHECK_UNAVAILABLE = "BombDeployCheckUnavailable"


DEFAULT_MESSAGES = {
    Lang.BOMB_DEPLOY_RESTRICTED: "Too many siege bombs deployed nearby. Please move to a different location.",
    Lang.BOMB_DEPLOY_CHECK_UNAVAILABLE: "Nearby siege bombs could not be checked right now. Please try again.",
}


class ToastStyle(IntEnum):
    """Game tip styles understood by the host client."""

    BLUE_NORMAL = 0
    RED_NORMAL = 1
    BLUE_LONG = 2
    BLUE_SHORT = 3
    SERVER_EVENT = 4


class Notifier(Protocol):
    """Host transport for messages addressed to one actor."""

    def send_reply(self, actor: Actor, message: str) -> None:
        """Deliver a chat message."""

    def show_toast(self, actor: Actor, message: str, style: ToastStyle) -> None:
        """Show a transient game tip."""


class MessageCatalog:
    """Per-language message tables with fallback to the default language."""

    def __init__(self, default_language: str = "en") -> None:
        self._default_language = default_language
        self._lock = threading.Lock()
        self._messages: dict[str, dict[str, str]] = {}

    def register_messages(self, messages: dict[str, str], language: str | None = None) -> None:
        lang = (language or self._default_language).lower()
        with self._lock:
            self._messages.setdefault(lang, {}).update(messages)

    def get_message(self, key: str, language: str | None = None, *args: object) -> str:
        """Resolve ``key`` for ``language``; unknown keys come back unchanged."""
        template = None
        for lang in (language, self._default_language):
            if lang:
                template = self._messages.get(lang.lower(), {}).get(key)
                if template is not None:
                    break
        if template is None:
            return key
        if args:
            return template.format(*args)
        return template


class Messenger:
    """Formats catalog messages for an actor and hands them to the notifier."""

    def __init__(
        self,
        catalog: MessageCatalog,
        notifier: Notifier,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._catalog = catalog
        self._notifier = notifier
        self._logger = logger or logging.getLogger("siege_limit.localization")

    def message_player(self, actor: Actor, message_key: str, *args: object) -> str:
        message = self._catalog.get_message(message_key, actor.language, *args)
        self._notifier.send_reply(actor, message)
        self._logger.debug("message_sent", extra={"user_id": actor.user_id, "message_key": message_key})
        return message

    def show_toast(
        self,
        actor: Actor,
        message_key: str,
        *args: object,
        style: ToastStyle = ToastStyle.BLUE_NORMAL,
    ) -> str:
        message = self._catalog.get_message(message_key, actor.language, *args)
        self._notifier.show_toast(actor, message, style)
        return message


class ConsoleNotifier:
    """Notifier that records deliveries and prints them; used by the CLI and tests."""

    def __init__(self, echo=None) -> None:
        self._echo = echo
        self.sent: list[tuple[str, str]] = []

    def send_reply(self, actor: Actor, message: str) -> None:
        self.sent.append((actor.user_id, message))
        if self._echo is not None:
            self._echo(f"{actor.display_name or actor.user_id}: {message}")

    def show_toast(self, actor: Actor, message: str, style: ToastStyle) -> None:
        self.sent.append((actor.user_id, message))
        if self._echo is not None:
            self._echo(f"toast ({style.name.lower()}) {actor.user_id}: {message}")
