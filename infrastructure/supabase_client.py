# infrastructure/supabase_client.py
"""
Cloud quote table (Supabase / PostgREST REST interface).

    list   -> GET    /rest/v1/<table>?select=*&order=createdAt.desc
    upsert -> POST   /rest/v1/<table>   (Prefer: resolution=merge-duplicates)
    delete -> DELETE /rest/v1/<table>?id=eq.<id>

Every network error, timeout or non-2xx answer becomes a
RepositoryUnavailableError; the repository falls back on the local copy.
"""

from typing import List, Optional

import requests

from domain.errors import RepositoryUnavailableError
from domain.quote import Quote
from infrastructure.logging_service import get_module_logger
from infrastructure.persistence import PersistenceService

logger = get_module_logger("Supabase", "supabase.log")

DEFAULT_TIMEOUT = 15


class SupabaseQuoteStore:

    def __init__(self, url: str, api_key: str, table: str = "quotes",
                 session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT):
        if not url or not api_key:
            raise ValueError("Supabase URL e chave são obrigatórias")
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def list(self) -> List[Quote]:
        resp = self._request("GET", params={"select": "*", "order": "createdAt.desc"})
        try:
            data = resp.json()
            return [PersistenceService.quote_from_record(item) for item in data]
        except (ValueError, KeyError, TypeError) as e:
            raise RepositoryUnavailableError(f"Resposta inválida do Supabase: {e}") from e

    def upsert(self, quote: Quote):
        self._request(
            "POST",
            json=PersistenceService.quote_to_record(quote),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def delete(self, quote_id: str):
        self._request("DELETE", params={"id": f"eq.{quote_id}"})

    def _request(self, method: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, self.endpoint, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RepositoryUnavailableError(f"Erro de rede ({method}): {e}") from e

        logger.debug(f"{method} {self.endpoint} -> {resp.status_code}")
        if not 200 <= resp.status_code < 300:
            raise RepositoryUnavailableError(f"Supabase {method} falhou ({resp.status_code}): {resp.text[:200]}")
        return resp
