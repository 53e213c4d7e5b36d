"""End-to-end tests of a run against a mocked site."""
import asyncio
import json

import httpx
import pytest
from cageots.errors import AuthenticationError, AuthErrorKind
from cageots.jobs.runner import KonnectorRunner
from cageots.store.files import BillFiles
from cageots.store.state import BillStateDB

from conftest import BAD_PASSWORD_HTML, BASE_URL, WELCOME_HTML, order_page, order_row


def _site(listing_html, login_html=WELCOME_HTML, calls=None):
    calls = calls if calls is not None else []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path))
        if request.method == "POST" and request.url.path == "/authentification":
            return httpx.Response(200, text=login_html)
        if request.url.path == "/historique-des-commandes":
            return httpx.Response(200, text=listing_html)
        if request.url.path == "/index.php":
            return httpx.Response(200, content=b"%PDF-1.4", headers={"Content-Type": "application/pdf"})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _runner(tmp_path, transport, **kwargs):
    return KonnectorRunner(
        login="jane@example.org",
        password="s3cret",
        base_url=BASE_URL,
        state_db=BillStateDB(tmp_path / "state.db"),
        files=BillFiles(tmp_path / "bills"),
        dev_dir=tmp_path / "dev",
        metrics_file=tmp_path / "metrics.jsonl",
        transport=transport,
        **kwargs,
    )


def test_run_saves_processed_order(tmp_path, scenario_html):
    """Test authenticate, fetch, extract and save in one run."""
    summary = asyncio.run(_runner(tmp_path, _site(scenario_html)).run())

    assert summary.outcome == "ok"
    assert summary.saved == ["2021-10-21_les_ptits_cageots_facture_86.15EUR_DDVMDIJTQ.pdf"]
    assert summary.counters["rows"] == 2
    assert summary.counters["rejected_status"] == 1
    assert (tmp_path / "bills" / summary.saved[0]).read_bytes() == b"%PDF-1.4"

    exported = [json.loads(line) for line in (tmp_path / "metrics.jsonl").read_text().splitlines()]
    assert exported[-1]["outcome"] == "ok"
    assert exported[-1]["saved"] == 1


def test_refused_login_stops_before_fetch(tmp_path, scenario_html):
    """Test nothing is fetched or saved when the login is refused."""
    calls = []
    runner = _runner(tmp_path, _site(scenario_html, login_html=BAD_PASSWORD_HTML, calls=calls))

    with pytest.raises(AuthenticationError) as exc_info:
        asyncio.run(runner.run())

    assert exc_info.value.kind == AuthErrorKind.AUTHENTICATION_FAILED
    assert calls == [("POST", "/authentification")]
    assert not list((tmp_path / "bills").iterdir())


def test_empty_listing_warns(tmp_path, caplog):
    """Test a run with no invoice is reported distinctly."""
    with caplog.at_level("WARNING"):
        summary = asyncio.run(_runner(tmp_path, _site(order_page())).run())

    assert summary.outcome == "empty"
    assert summary.saved == []
    assert "No invoice found" in caplog.text


def test_dry_run_saves_nothing(tmp_path, scenario_html):
    """Test dry-run writes the extraction for inspection only."""
    runner = _runner(tmp_path, _site(scenario_html), dry_run=True)
    summary = asyncio.run(runner.run())

    assert summary.outcome == "dry_run"
    assert not list((tmp_path / "bills").iterdir())
    extracted = json.loads((tmp_path / "dev" / summary.run_id / "extracted.json").read_text())
    assert [bill["vendorRef"] for bill in extracted] == ["DDVMDIJTQ"]


def test_second_run_finds_duplicates(tmp_path, scenario_html):
    """Test bills are not saved twice across runs."""
    asyncio.run(_runner(tmp_path, _site(scenario_html)).run())
    summary = asyncio.run(_runner(tmp_path, _site(scenario_html)).run())

    assert summary.saved == []
    assert summary.counters["duplicates"] == 1


def test_skipped_rows_are_reported(tmp_path):
    """Test rows dropped for invalid fields are listed in the summary."""
    listing = order_page(order_row(ref="BADAMOUNT", amount="quatre-vingts"), order_row(ref="GOOD"))
    runner = _runner(tmp_path, _site(listing), dry_run=True)
    summary = asyncio.run(runner.run())

    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("BADAMOUNT: Invalid amount")
    written = json.loads((tmp_path / "dev" / summary.run_id / "summary.json").read_text())
    assert written["errors"] == summary.errors
    assert written["invalid"] == 1
