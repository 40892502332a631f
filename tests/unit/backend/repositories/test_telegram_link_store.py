"""
Unit Tests for the Telegram Link Store.
"""

from beautyslot.backend.repositories.telegram import TelegramLinkStore


class TestLinking:
    def test_phone_is_normalized(self):
        store = TelegramLinkStore()

        link = store.link("8 (916) 123-45-67", telegram_id=111, client_id=1)

        assert link.phone == "79161234567"
        assert store.get_by_phone("+7 916 123 45 67") is link
        assert store.is_linked("9161234567")

    def test_lookup_by_telegram_and_client(self):
        store = TelegramLinkStore()
        store.link("+79161234567", telegram_id=111, client_id=1)

        assert store.get_by_telegram_id(111).client_id == 1
        assert store.get_by_client_id(1).telegram_id == 111
        assert store.get_by_telegram_id(222) is None
        assert store.get_by_client_id(2) is None

    def test_relinking_phone_replaces_account(self):
        store = TelegramLinkStore()
        store.link("+79161234567", telegram_id=111, client_id=1)

        store.link("+79161234567", telegram_id=222, client_id=1)

        assert store.count() == 1
        assert not store.is_telegram_linked(111)
        assert store.get_by_phone("+79161234567").telegram_id == 222

    def test_relinking_account_replaces_phone(self):
        store = TelegramLinkStore()
        store.link("+79161234567", telegram_id=111, client_id=1)

        store.link("+79990000000", telegram_id=111, client_id=2)

        assert store.count() == 1
        assert store.get_by_phone("+79161234567") is None
        assert store.get_by_telegram_id(111).client_id == 2

    def test_unlink(self):
        store = TelegramLinkStore()
        store.link("+79161234567", telegram_id=111, client_id=1)

        assert store.unlink("89161234567") is True
        assert store.unlink("89161234567") is False
        assert not store.is_telegram_linked(111)
        assert store.all() == []
