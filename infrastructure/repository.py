# infrastructure/repository.py
"""
Quote repository: write-through cache over two tiers.

- Primary: the cloud table (SupabaseQuoteStore).
- Secondary: the local copy (LocalQuoteStore), a best-effort mirror.

Reads come from the cloud and refresh the mirror; when the cloud fails the
mirror is served instead. Writes always reach the mirror, and reach the cloud
when it answers. There is no reconciliation: if the cloud was down during a
write, the two tiers differ until the same quote is saved again while the cloud
is up, and the next successful list() replaces the mirror with the cloud data.
After a successful cloud write the returned view is re-read from the cloud.
Remote failures are never swallowed: they come back as `ok=False` with a
message the UI shows as a warning. A local copy that cannot be written raises
LocalStoreError on upsert/delete.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from domain.errors import LocalStoreError, RepositoryUnavailableError
from domain.quote import Quote
from infrastructure.local_store import LocalQuoteStore
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("Repository", "repository.log")

FALLBACK_LIST_MESSAGE = "Sem ligação à nuvem: a mostrar a cópia local de segurança."
FALLBACK_SAVE_MESSAGE = "Erro ao guardar na nuvem. Os dados foram guardados localmente como backup."
FALLBACK_DELETE_MESSAGE = "Erro ao eliminar na nuvem. O orçamento foi removido apenas da cópia local."
NOT_CONFIGURED_MESSAGE = "Nuvem não configurada"
LOCAL_UNAVAILABLE_MESSAGE = "Sem ligação à nuvem e a cópia local está inacessível."


@dataclass
class RepositoryResult:
    quotes: List[Quote] = field(default_factory=list)
    ok: bool = True  # False = cloud failed, the local copy was used
    message: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return not self.ok


def newest_first(quotes: List[Quote]) -> List[Quote]:
    """Order by `created_at` descending; quotes without a creation date go last."""
    return sorted(quotes, key=lambda q: q.created_at or "", reverse=True)


class QuoteRepository:

    def __init__(self, remote, local: LocalQuoteStore):
        """`remote` is a SupabaseQuoteStore, or None when the cloud is not configured."""
        self.remote = remote
        self.local = local

    def list(self) -> RepositoryResult:
        """All quotes, newest first; the local copy (same order) when the cloud is down."""
        try:
            quotes = self._remote().list()
        except RepositoryUnavailableError as e:
            logger.warning(f"Erro ao carregar orçamentos: {e}")
            return self._local_fallback()

        try:
            self.local.save_all(quotes)
        except LocalStoreError as e:
            logger.warning(f"Cópia local não atualizada: {e}")
        logger.info(f"{len(quotes)} orçamentos carregados da nuvem")
        return RepositoryResult(quotes)

    def upsert(self, quote: Quote) -> RepositoryResult:
        """Write the mirror, then the cloud. On success the view is the fresh cloud list."""
        quotes = self.local.upsert(quote)
        try:
            self._remote().upsert(quote)
        except RepositoryUnavailableError as e:
            logger.warning(f"Erro ao guardar {quote.id} na nuvem: {e}")
            return RepositoryResult(newest_first(quotes), ok=False, message=FALLBACK_SAVE_MESSAGE)
        logger.info(f"Orçamento {quote.id} guardado ({quote.status.value})")
        return self.list()

    def delete(self, quote_id: str) -> RepositoryResult:
        quotes = self.local.delete(quote_id)
        try:
            self._remote().delete(quote_id)
        except RepositoryUnavailableError as e:
            logger.warning(f"Erro ao eliminar {quote_id} na nuvem: {e}")
            return RepositoryResult(newest_first(quotes), ok=False, message=FALLBACK_DELETE_MESSAGE)
        logger.info(f"Orçamento {quote_id} eliminado")
        return self.list()

    def _local_fallback(self) -> RepositoryResult:
        try:
            quotes = self.local.load()
        except LocalStoreError as e:
            logger.error(f"Cópia local inacessível: {e}")
            return RepositoryResult([], ok=False, message=LOCAL_UNAVAILABLE_MESSAGE)
        return RepositoryResult(newest_first(quotes), ok=False, message=FALLBACK_LIST_MESSAGE)

    def _remote(self):
        if self.remote is None:
            raise RepositoryUnavailableError(NOT_CONFIGURED_MESSAGE)
        return self.remote


def create_repository(config) -> QuoteRepository:
    """Wire the repository from the configuration (cloud optional)."""
    from infrastructure.database import Database
    from infrastructure.supabase_client import SupabaseQuoteStore

    local = LocalQuoteStore(Database(config.get_local_db_path()))
    remote = None
    if config.is_cloud_configured():
        remote = SupabaseQuoteStore(config.get_supabase_url(), config.get_supabase_key(),
                                    table=config.get_supabase_table())
    else:
        logger.warning("Supabase não configurado: a trabalhar apenas com a cópia local.")
    return QuoteRepository(remote, local)
