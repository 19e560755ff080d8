"""
Tests for the command-line front end.

Run with:
    python -m pytest tests/test_cli.py
"""
import asyncio
import io
import shutil
import tempfile
import unittest
from unittest.mock import patch

import typer
from rich.console import Console
from typer.testing import CliRunner

from game_vault import cli
from game_vault.cli import app, parse_assignments, resolve_id
from game_vault.config import Settings
from game_vault.models import GameEntry, ListResult, VaultState


class FakeClient:
    """Stands in for GameVaultClient inside ``async with``."""

    def __init__(self, games=()):
        self.games = tuple(games)
        self.queries = []

    @classmethod
    def factory(cls, client):
        return type("Factory", (), {"from_settings": staticmethod(lambda settings: client)})

    async def list(self, query, credential=None):
        self.queries.append(dict(query))
        games = [g for g in self.games if query.get("q", "").lower() in g.title.lower()]
        return ListResult(entries=tuple(games), total=len(games))

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return None


class TestCliHelpers(unittest.TestCase):

    def test_parse_assignments(self):
        updates = parse_assignments(["title=Hades II", "hours=12", "favorite=yes", "status=playing"])
        self.assertEqual(
            updates,
            {"title": "Hades II", "hours_played": 12, "favorite": True, "status": "playing"},
        )

    def test_parse_assignments_rejects_unknown_field(self):
        with self.assertRaises(typer.BadParameter):
            parse_assignments(["id=3"])
        with self.assertRaises(typer.BadParameter):
            parse_assignments(["title"])

    def test_resolve_id(self):
        state = VaultState(games=(GameEntry(id=3, title="a"), GameEntry(id="abc", title="b")))
        self.assertEqual(resolve_id(state, "3"), 3)
        self.assertEqual(resolve_id(state, "abc"), "abc")
        self.assertIsNone(resolve_id(state, "4"))


class TestBrowse(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.settings = Settings(data_dir=self.tmp, language="en")
        self.output = io.StringIO()
        self.client = FakeClient([GameEntry(id=1, title="Zelda"), GameEntry(id=2, title="Hades")])

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def browse(self, *lines):
        with patch.object(cli, "GameVaultClient", FakeClient.factory(self.client)), \
                patch.object(cli, "console", Console(file=self.output, width=120)), \
                patch.object(cli.Prompt, "ask", side_effect=list(lines)):
            asyncio.run(cli._browse(self.settings, 8))
        return self.output.getvalue()

    def test_unbalanced_quote_keeps_session_alive(self):
        output = self.browse('/search "zelda', "/search zelda", "quit")

        self.assertIn("No closing quotation", output)
        self.assertEqual(self.client.queries[-1], {"q": "zelda", "page": 1, "limit": 8})
        self.assertIn("Goodbye", output)

    def test_bad_page_number_is_reported(self):
        output = self.browse("/page two", "quit")

        self.assertIn("invalid literal", output)
        self.assertEqual(len(self.client.queries), 1)


class TestSettingsErrors(unittest.TestCase):

    def test_invalid_timeout_exits_with_message(self):
        tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tmp, True)
        result = CliRunner().invoke(
            app, ["logout"], env={"GAME_VAULT_TIMEOUT": "soon", "GAME_VAULT_DATA_DIR": tmp}
        )

        self.assertEqual(result.exit_code, 1)
        self.assertIn("GAME_VAULT_TIMEOUT", result.output)
        self.assertNotIn("Traceback", result.output)


if __name__ == '__main__':
    unittest.main()
