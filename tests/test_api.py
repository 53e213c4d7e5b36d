"""Tests for the HTTP API."""
import httpx
import pytest
from fastapi.testclient import TestClient

from cageots.api import main as api
from cageots.config import Config, config
from cageots.jobs.runner import KonnectorRunner
from cageots.store.files import BillFiles
from cageots.store.state import BillStateDB

from conftest import BAD_PASSWORD_HTML, BASE_URL, WELCOME_HTML


@pytest.fixture(autouse=True)
def fresh_runs(monkeypatch):
    monkeypatch.setattr(api, "_runs", {})
    monkeypatch.setattr(api, "_active_run", None)
    monkeypatch.setattr(config, "API_KEY", None)
    monkeypatch.setattr(Config, "SUPABASE_URL", None)


def _mock_runner(monkeypatch, tmp_path, listing_html, login_html=WELCOME_HTML):
    """Make /run build runners that talk to a mocked site and write under tmp_path."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/authentification":
            return httpx.Response(200, text=login_html)
        if request.url.path == "/historique-des-commandes":
            return httpx.Response(200, text=listing_html)
        if request.url.path == "/index.php":
            return httpx.Response(200, content=b"%PDF-1.4")
        return httpx.Response(404)

    def factory(**kwargs):
        return KonnectorRunner(
            base_url=BASE_URL,
            state_db=BillStateDB(tmp_path / "state.db"),
            files=BillFiles(tmp_path / "bills"),
            dev_dir=tmp_path / "dev",
            metrics_file=tmp_path / "metrics.jsonl",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    monkeypatch.setattr(api, "KonnectorRunner", factory)


def test_health():
    """Test health check endpoint."""
    client = TestClient(api.app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["running"] is False


def test_run_requires_api_key(monkeypatch):
    """Test the API key is enforced when configured."""
    monkeypatch.setattr(config, "API_KEY", "secret-key")
    client = TestClient(api.app)
    response = client.post("/run", json={"login": "jane@example.org", "password": "pw"})
    assert response.status_code == 403


def test_run_requires_credentials(monkeypatch):
    """Test credentials must come from the request or the environment."""
    monkeypatch.setattr(config, "LOGIN", None)
    monkeypatch.setattr(config, "PASSWORD", None)
    client = TestClient(api.app)
    response = client.post("/run", json={})
    assert response.status_code == 400


def test_run_in_background_and_read_status(monkeypatch, tmp_path, scenario_html):
    """Test a started run saves the invoice and reports it by run id."""
    _mock_runner(monkeypatch, tmp_path, scenario_html)
    client = TestClient(api.app)

    response = client.post("/run", json={"login": "jane@example.org", "password": "s3cret"})
    assert response.status_code == 202
    assert response.json()["status"] == "started"
    run_id = response.json()["run_id"]

    status = client.get(f"/run/{run_id}").json()
    assert status["status"] == "done"
    assert status["outcome"] == "ok"
    assert status["saved"] == ["2021-10-21_les_ptits_cageots_facture_86.15EUR_DDVMDIJTQ.pdf"]
    assert client.get("/health").json()["running"] is False


def test_refused_login_is_reported_on_the_run(monkeypatch, tmp_path, scenario_html):
    """Test an authentication failure ends the run with its reason."""
    _mock_runner(monkeypatch, tmp_path, scenario_html, login_html=BAD_PASSWORD_HTML)
    client = TestClient(api.app)

    run_id = client.post("/run", json={"login": "jane@example.org", "password": "bad"}).json()["run_id"]

    status = client.get(f"/run/{run_id}").json()
    assert status["status"] == "failed"
    assert status["error"] == "authentication_failed"
    assert not list((tmp_path / "bills").iterdir())


def test_second_run_is_refused_while_busy(monkeypatch):
    """Test only one run at a time."""
    monkeypatch.setattr(api, "_active_run", "other-run")
    client = TestClient(api.app)
    response = client.post("/run", json={"login": "jane@example.org", "password": "pw"})
    assert response.status_code == 409
    assert client.get("/health").json()["running"] is True


def test_unknown_run():
    """Test an unknown run id."""
    client = TestClient(api.app)
    assert client.get("/run/does-not-exist").status_code == 404


def test_list_bills_empty(monkeypatch, tmp_path):
    """Test the bills listing on a fresh database."""
    monkeypatch.setattr(api, "state_db", BillStateDB(tmp_path / "state.db"))
    client = TestClient(api.app)
    response = client.get("/bills")
    assert response.status_code == 200
    assert response.json() == {"bills": []}
