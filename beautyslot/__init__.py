"""
BeautySlot salon admin backend.

- backend/: FastAPI application, YClients integration, in-memory stores, services
- telegram/: Telegram bot integration (aiogram v3)
"""
