# tests/test_repository.py
"""
Tests du repository : nuvem primaire + copie locale SQLite (fallback).
"""

import os
import shutil
import sqlite3
import tempfile
import unittest

from domain.errors import LocalStoreError, QuoteError, RepositoryUnavailableError
from domain.material import MaterialLine
from domain.quote import Quote, QuoteStatus
from domain.workflow import ApprovalWorkflow
from infrastructure.configuration import ConfigurationService
from infrastructure.database import Database
from infrastructure.local_store import LOCAL_STORAGE_KEY, LocalQuoteStore
from infrastructure.repository import (FALLBACK_DELETE_MESSAGE, FALLBACK_LIST_MESSAGE,
                                       FALLBACK_SAVE_MESSAGE, NOT_CONFIGURED_MESSAGE,
                                       QuoteRepository, create_repository)


def make_quote(quote_id, client="", created_at=None):
    return Quote(id=quote_id, client=client, materials=[MaterialLine()], created_at=created_at)


class FakeRemote:
    """In-memory cloud table; `down=True` simulates a network failure."""

    def __init__(self, quotes=None):
        self.quotes = list(quotes or [])
        self.down = False
        self.calls = []

    def _check(self, name):
        self.calls.append(name)
        if self.down:
            raise RepositoryUnavailableError("timeout")

    def list(self):
        self._check("list")
        return [q.copy() for q in self.quotes]

    def upsert(self, quote):
        self._check("upsert")
        self.quotes = [q for q in self.quotes if q.id != quote.id] + [quote.copy()]

    def delete(self, quote_id):
        self._check("delete")
        self.quotes = [q for q in self.quotes if q.id != quote_id]


class LockedDatabase(Database):
    """SQLite file held by another writer: every write fails."""

    def set_item(self, key, value):
        raise sqlite3.OperationalError("database is locked")


class TempDbTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db = Database(os.path.join(self.temp_dir, "local.db"))
        self.local = LocalQuoteStore(self.db)

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)


class TestLocalQuoteStore(TempDbTestCase):

    def test_empty_store(self):
        self.assertEqual(self.local.load(), [])

    def test_upsert_inserts_first(self):
        self.local.upsert(make_quote("a"))
        quotes = self.local.upsert(make_quote("b"))
        self.assertEqual([q.id for q in quotes], ["b", "a"])
        self.assertEqual([q.id for q in self.local.load()], ["b", "a"])

    def test_upsert_replaces_in_place(self):
        self.local.save_all([make_quote("a"), make_quote("b"), make_quote("c")])
        quotes = self.local.upsert(make_quote("b", client="NOVO"))
        self.assertEqual([q.id for q in quotes], ["a", "b", "c"])
        self.assertEqual(self.local.load()[1].client, "NOVO")

    def test_delete(self):
        self.local.save_all([make_quote("a"), make_quote("b")])
        self.assertEqual([q.id for q in self.local.delete("a")], ["b"])
        self.assertEqual([q.id for q in self.local.delete("missing")], ["b"])

    def test_single_key_entry(self):
        self.local.upsert(make_quote("a"))
        self.assertIsNotNone(self.db.get_item(LOCAL_STORAGE_KEY))
        self.assertIsNone(self.db.get_item("outra_chave"))

    def test_corrupt_entry_reads_as_empty(self):
        self.db.set_item(LOCAL_STORAGE_KEY, "{not json")
        self.assertEqual(self.local.load(), [])

    def test_clear(self):
        self.local.upsert(make_quote("a"))
        self.local.clear()
        self.assertEqual(self.local.load(), [])


class TestQuoteRepository(TempDbTestCase):

    def setUp(self):
        super().setUp()
        self.remote = FakeRemote([make_quote("r1"), make_quote("r2")])
        self.repo = QuoteRepository(self.remote, self.local)

    def test_list_refreshes_local_copy(self):
        result = self.repo.list()
        self.assertTrue(result.ok)
        self.assertIsNone(result.message)
        self.assertEqual([q.id for q in result.quotes], ["r1", "r2"])
        self.assertEqual([q.id for q in self.local.load()], ["r1", "r2"])

    def test_list_falls_back_on_local_copy(self):
        self.repo.list()
        self.remote.down = True

        result = self.repo.list()
        self.assertFalse(result.ok)
        self.assertTrue(result.used_fallback)
        self.assertEqual(result.message, FALLBACK_LIST_MESSAGE)
        self.assertEqual([q.id for q in result.quotes], ["r1", "r2"])

    def test_upsert_reaches_both_tiers(self):
        quote = make_quote("n1")
        quote.status = QuoteStatus.PENDING_APPROVAL
        result = self.repo.upsert(quote)
        self.assertTrue(result.ok)
        self.assertIn("n1", [q.id for q in self.remote.quotes])
        saved = {q.id: q for q in self.local.load()}
        self.assertEqual(saved["n1"].status, QuoteStatus.PENDING_APPROVAL)

    def test_upsert_failure_is_reported_and_kept_locally(self):
        self.remote.down = True
        result = self.repo.upsert(make_quote("n1"))
        self.assertFalse(result.ok)
        self.assertEqual(result.message, FALLBACK_SAVE_MESSAGE)
        self.assertEqual([q.id for q in result.quotes], ["n1"])
        self.assertNotIn("n1", [q.id for q in self.remote.quotes])

    def test_delete_failure_is_reported_and_applied_locally(self):
        self.repo.list()
        self.remote.down = True
        result = self.repo.delete("r1")
        self.assertFalse(result.ok)
        self.assertEqual(result.message, FALLBACK_DELETE_MESSAGE)
        self.assertEqual([q.id for q in self.local.load()], ["r2"])
        self.assertIn("r1", [q.id for q in self.remote.quotes])

    def test_delete(self):
        self.repo.list()
        result = self.repo.delete("r2")
        self.assertTrue(result.ok)
        self.assertEqual([q.id for q in result.quotes], ["r1"])
        self.assertEqual([q.id for q in self.remote.quotes], ["r1"])

    def test_save_returns_cloud_list_when_local_copy_is_stale(self):
        # arranque sem nuvem: a cópia local fica vazia
        self.remote.down = True
        self.repo.list()
        self.remote.down = False

        result = self.repo.upsert(make_quote("n"))
        self.assertTrue(result.ok)
        self.assertEqual(sorted(q.id for q in result.quotes), ["n", "r1", "r2"])
        self.assertEqual(sorted(q.id for q in self.local.load()), ["n", "r1", "r2"])

    def test_delete_returns_cloud_list_when_local_copy_is_stale(self):
        result = self.repo.delete("r1")
        self.assertTrue(result.ok)
        self.assertEqual([q.id for q in result.quotes], ["r2"])

    def test_fallback_list_is_newest_first(self):
        self.remote.down = True
        self.repo.upsert(make_quote("newer", created_at="2024-03-05T09:00:00.000Z"))
        self.repo.upsert(make_quote("older", created_at="2024-03-01T09:00:00.000Z"))
        self.repo.upsert(make_quote("undated"))

        result = self.repo.list()
        self.assertFalse(result.ok)
        self.assertEqual([q.id for q in result.quotes], ["newer", "older", "undated"])

    def test_without_cloud(self):
        repo = QuoteRepository(None, self.local)
        result = repo.upsert(make_quote("x"))
        self.assertFalse(result.ok)
        self.assertEqual([q.id for q in repo.list().quotes], ["x"])
        self.assertEqual(repo.list().message, FALLBACK_LIST_MESSAGE)


class TestLockedLocalCopy(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.local = LocalQuoteStore(LockedDatabase(os.path.join(self.temp_dir, "local.db")))
        self.remote = FakeRemote([make_quote("r1")])
        self.repo = QuoteRepository(self.remote, self.local)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_store_write_raises_local_store_error(self):
        with self.assertRaises(LocalStoreError) as ctx:
            self.local.upsert(make_quote("a"))
        self.assertIsInstance(ctx.exception.__cause__, sqlite3.OperationalError)

    def test_list_still_serves_cloud_data(self):
        result = self.repo.list()
        self.assertTrue(result.ok)
        self.assertEqual([q.id for q in result.quotes], ["r1"])

    def test_upsert_raises_quote_error(self):
        with self.assertRaises(QuoteError):
            self.repo.upsert(make_quote("n"))

    def test_submit_surfaces_error_and_releases_export_lock(self):
        workflow = ApprovalWorkflow(persist=self.repo.upsert)
        quote = make_quote("n")

        with self.assertRaises(LocalStoreError):
            workflow.submit_for_approval(quote, lambda q: True)
        self.assertFalse(workflow.is_exporting)
        self.assertEqual(quote.status, QuoteStatus.DRAFT)


class TestCreateRepository(TempDbTestCase):

    def setUp(self):
        super().setUp()
        self._saved_env = {k: os.environ.pop(k) for k in ("SUPABASE_URL", "SUPABASE_ANON_KEY") if k in os.environ}

    def tearDown(self):
        os.environ.update(self._saved_env)
        super().tearDown()

    def _config(self, **values):
        config = ConfigurationService(config_path=os.path.join(self.temp_dir, "app_config.json"),
                                      env_file=os.path.join(self.temp_dir, "missing.env"))
        config.config.update(values)
        return config

    def test_local_only_when_cloud_not_configured(self):
        repo = create_repository(self._config(local_db_path=os.path.join(self.temp_dir, "x.db")))
        self.assertIsNone(repo.remote)
        with self.assertRaises(RepositoryUnavailableError) as ctx:
            repo._remote()
        self.assertEqual(str(ctx.exception), NOT_CONFIGURED_MESSAGE)
        self.assertTrue(os.path.exists(os.path.join(self.temp_dir, "x.db")))

    def test_cloud_store_when_configured(self):
        repo = create_repository(self._config(
            supabase_url="https://demo.supabase.co/",
            supabase_anon_key="anon",
            supabase_table="orcamentos",
            local_db_path=os.path.join(self.temp_dir, "y.db"),
        ))
        self.assertEqual(repo.remote.endpoint, "https://demo.supabase.co/rest/v1/orcamentos")


if __name__ == "__main__":
    unittest.main()
