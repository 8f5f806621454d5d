# infrastructure/local_store.py
import sqlite3
from typing import List

from domain.errors import LocalStoreError
from domain.quote import Quote
from infrastructure.database import Database
from infrastructure.logging_service import get_module_logger
from infrastructure.persistence import PersistenceService

logger = get_module_logger("LocalStore", "local_store.log")

LOCAL_STORAGE_KEY = "aorubro_quotes"


class LocalQuoteStore:
    """
    Offline copy of the quote list.

    The whole list lives under a single key as one JSON document and is
    rewritten wholesale on every mutation. SQLite failures (locked file,
    unreadable database) come out as LocalStoreError.
    """

    def __init__(self, database: Database, key: str = LOCAL_STORAGE_KEY):
        self.database = database
        self.key = key

    def load(self) -> List[Quote]:
        try:
            raw = self.database.get_item(self.key)
        except sqlite3.Error as e:
            logger.error(f"Leitura da cópia local falhou: {e}")
            raise LocalStoreError(f"Cópia local inacessível: {e}") from e
        if not raw:
            return []
        try:
            return PersistenceService.quotes_from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Cópia local corrompida ({self.key}): {e}")
            return []

    def save_all(self, quotes: List[Quote]):
        try:
            self.database.set_item(self.key, PersistenceService.quotes_to_json(quotes))
        except sqlite3.Error as e:
            logger.error(f"Escrita da cópia local falhou: {e}")
            raise LocalStoreError(f"Erro ao gravar a cópia local: {e}") from e
        logger.debug(f"Cópia local reescrita: {len(quotes)} orçamentos")

    def upsert(self, quote: Quote) -> List[Quote]:
        """Replace the quote with the same id in place, or put it first."""
        quotes = self.load()
        for idx, existing in enumerate(quotes):
            if existing.id == quote.id:
                quotes[idx] = quote
                break
        else:
            quotes.insert(0, quote)
        self.save_all(quotes)
        return quotes

    def delete(self, quote_id: str) -> List[Quote]:
        quotes = [q for q in self.load() if q.id != quote_id]
        self.save_all(quotes)
        return quotes

    def clear(self):
        try:
            self.database.remove_item(self.key)
        except sqlite3.Error as e:
            raise LocalStoreError(f"Erro ao limpar a cópia local: {e}") from e
