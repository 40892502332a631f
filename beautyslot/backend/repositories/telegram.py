"""
Telegram Link Store.

Maps normalized phone numbers to Telegram accounts and back. A phone
has at most one link and a Telegram account links to at most one phone;
relinking either side replaces the old mapping.
"""

from beautyslot.backend.core.logging import get_logger
from beautyslot.backend.core.utils import mask_phone, normalize_phone
from beautyslot.backend.models.telegram import TelegramLink

logger = get_logger(__name__)


class TelegramLinkStore:
    """In-memory phone <-> Telegram account bindings."""

    def __init__(self) -> None:
        self._by_phone: dict[str, TelegramLink] = {}
        self._phone_by_telegram_id: dict[int, str] = {}

    def link(
        self,
        phone: str,
        telegram_id: int,
        client_id: int,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> TelegramLink:
        """
        Bind a client's phone to a Telegram account.

        Args:
            phone: Phone in any format; stored normalized
            telegram_id: Telegram user id (equals the private chat id)
            client_id: YClients client id
            username: Telegram @username, if any
            first_name: Telegram first name
            last_name: Telegram last name

        Returns:
            The stored link
        """
        normalized = normalize_phone(phone)

        previous = self._by_phone.get(normalized)
        if previous is not None:
            self._phone_by_telegram_id.pop(previous.telegram_id, None)
        previous_phone = self._phone_by_telegram_id.get(telegram_id)
        if previous_phone is not None:
            self._by_phone.pop(previous_phone, None)

        link = TelegramLink(
            phone=normalized,
            telegram_id=telegram_id,
            client_id=client_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
        )
        self._by_phone[normalized] = link
        self._phone_by_telegram_id[telegram_id] = normalized

        logger.info(
            "Telegram account linked",
            extra={"phone": mask_phone(normalized), "telegram_id": telegram_id, "client_id": client_id},
        )
        return link

    def get_by_phone(self, phone: str) -> TelegramLink | None:
        return self._by_phone.get(normalize_phone(phone))

    def get_by_telegram_id(self, telegram_id: int) -> TelegramLink | None:
        phone = self._phone_by_telegram_id.get(telegram_id)
        if phone is None:
            return None
        return self._by_phone.get(phone)

    def get_by_client_id(self, client_id: int) -> TelegramLink | None:
        return next((link for link in self._by_phone.values() if link.client_id == client_id), None)

    def all(self) -> list[TelegramLink]:
        return list(self._by_phone.values())

    def count(self) -> int:
        return len(self._by_phone)

    def unlink(self, phone: str) -> bool:
        """Remove a link. Returns False when the phone was not linked."""
        link = self._by_phone.pop(normalize_phone(phone), None)
        if link is None:
            return False
        self._phone_by_telegram_id.pop(link.telegram_id, None)
        return True

    def is_linked(self, phone: str) -> bool:
        return normalize_phone(phone) in self._by_phone

    def is_telegram_linked(self, telegram_id: int) -> bool:
        return telegram_id in self._phone_by_telegram_id


_store: TelegramLinkStore | None = None


def get_telegram_store() -> TelegramLinkStore:
    """Get the process-wide link store, creating it on first use."""
    global _store
    if _store is None:
        _store = TelegramLinkStore()
    return _store


def reset_telegram_store() -> None:
    global _store
    _store = TelegramLinkStore()
