"""Tests for the admin CLI."""

import json

import pytest

from snip.cli import SnipCLI, build_parser, main
from snip.config import Config


@pytest.fixture
def cli(service):
    """CLI bound to the in-memory test service."""
    return SnipCLI(Config(store_backend="memory"), service=service)


def parse(*argv):
    return build_parser().parse_args(["--backend", "memory", *argv])


class TestParser:
    """Test argument parsing."""

    def test_shorten_arguments(self):
        args = parse("shorten", "https://example.com", "--owner", "alice", "--custom-code", "promo")

        assert args.command == "shorten"
        assert args.url == "https://example.com"
        assert args.owner == "alice"
        assert args.custom_code == "promo"
        assert args.expires_at is None

    def test_list_defaults(self):
        args = parse("list", "--owner", "alice")

        assert args.page == 1
        assert args.limit == 50
        assert args.sort_by == "clicks"
        assert args.order == "desc"

    def test_backend_defaults_to_postgres(self, monkeypatch):
        monkeypatch.delenv("STORE_BACKEND", raising=False)

        assert build_parser().parse_args(["health"]).backend == "postgres"

    def test_owner_required(self):
        with pytest.raises(SystemExit):
            parse("delete", "abc")


class TestCommands:
    """Test command dispatch against an injected service."""

    async def test_shorten_and_resolve(self, cli, service, capsys):
        code = await cli.run(parse("shorten", "https://example.com", "--owner", "alice", "--custom-code", "promo"))
        out = json.loads(capsys.readouterr().out)

        assert code == 0
        assert out["success"] is True
        assert out["data"]["short_code"] == "promo"

        code = await cli.run(parse("resolve", "promo"))
        out = json.loads(capsys.readouterr().out)

        assert code == 0
        assert out["data"]["original_url"] == "https://example.com"
        analytics = await service.get_analytics("promo", owner="alice")
        assert analytics["total_clicks"] == 1
        assert analytics["click_events"][0]["user_agent"] == "snip-cli"

    async def test_service_error_exit_code(self, cli, capsys):
        code = await cli.run(parse("analytics", "missing", "--owner", "alice"))
        captured = capsys.readouterr()

        assert code == 1
        error = json.loads(captured.err)
        assert error["success"] is False
        assert error["status"] == 404
        assert captured.out == ""

    async def test_list_and_delete(self, cli, service, capsys):
        await service.shorten_url("https://a.example", custom_code="first", owner="alice")
        await service.shorten_url("https://b.example", custom_code="second", owner="alice")

        assert await cli.run(parse("delete", "first", "--owner", "alice")) == 0
        capsys.readouterr()

        assert await cli.run(parse("list", "--owner", "alice", "--sort-by", "code", "--order", "asc")) == 0
        out = json.loads(capsys.readouterr().out)
        assert [l["short_code"] for l in out["data"]["links"]] == ["second"]

    async def test_purge(self, cli, store, service, capsys):
        await service.shorten_url("https://a.example", custom_code="gone", owner="alice")

        assert await cli.run(parse("purge", "gone")) == 0
        assert not await store.exists_by_code("gone")

    async def test_health(self, cli, capsys):
        assert await cli.run(parse("health")) == 0
        out = json.loads(capsys.readouterr().out)

        assert out["data"]["health"]["overall"] is True
        assert out["data"]["statistics"]["total_links"] == 0


class TestMain:
    """Test the full entry point with a memory backend."""

    async def test_main_shorten(self, capsys):
        code = await main(["--backend", "memory", "shorten", "https://example.com", "--owner", "alice"])
        captured = capsys.readouterr()
        out = json.loads(captured.out)

        assert code == 0
        assert len(out["data"]["short_code"]) == 7
        assert "do not persist" in captured.err

    async def test_main_without_command(self, capsys):
        assert await main(["--backend", "memory"]) == 1
