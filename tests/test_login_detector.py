"""Tests for login response classification."""
import pytest
from cageots.auth.login_detector import (
    WELCOME_MARKER,
    classify_login_response,
    is_login_page,
)
from cageots.errors import AuthErrorKind


def _page(body: str) -> str:
    return f"<html><body><div id='center_column'>{body}</div></body></html>"


def test_welcome_marker_is_success():
    """Test the welcome message means a successful login."""
    result = classify_login_response(_page(f"<p>{WELCOME_MARKER}</p>"))
    assert result.ok is True
    assert result.error is None


def test_welcome_marker_with_entities():
    """Test the apostrophe may be encoded as an HTML entity."""
    result = classify_login_response(_page("<p>Bienvenue sur votre page d&#039;accueil.</p>"))
    assert result.ok is True


def test_welcome_wins_over_error_markers():
    """Test success is decided before looking at error markers."""
    html = _page(f"<p>{WELCOME_MARKER}</p><p>Adresse e-mail requise</p>")
    assert classify_login_response(html).ok is True


@pytest.mark.parametrize(
    "message, kind",
    [
        ("Adresse e-mail requise", AuthErrorKind.MISSING_EMAIL),
        ("Adresse e-mail invalide", AuthErrorKind.INVALID_EMAIL),
        ("Mot de passe requis", AuthErrorKind.MISSING_PASSWORD),
        ("Erreur : mot de passe non valable.", AuthErrorKind.INVALID_PASSWORD),
        ("Échec d'authentification", AuthErrorKind.AUTHENTICATION_FAILED),
    ],
)
def test_error_markers(message, kind):
    """Test each known error message maps to its reason."""
    result = classify_login_response(_page(f"<ol><li>{message}</li></ol>"))
    assert result.ok is False
    assert result.error == kind


def test_authentication_failed_entity_encoded():
    """Test the generic failure as emitted by the site."""
    html = _page("<ol><li>&Eacute;chec d&#039;authentification</li></ol>")
    result = classify_login_response(html)
    assert result.error == AuthErrorKind.AUTHENTICATION_FAILED


def test_first_marker_in_priority_order_wins():
    """Test that the missing e-mail reason is reported before password reasons."""
    html = _page("<li>Mot de passe requis</li><li>Adresse e-mail requise</li>")
    assert classify_login_response(html).error == AuthErrorKind.MISSING_EMAIL


def test_unknown_page_is_unknown_error():
    """Test a page with no known marker is a failure, never a success."""
    result = classify_login_response(_page("<p>Maintenance en cours</p>"))
    assert result.ok is False
    assert result.error == AuthErrorKind.UNKNOWN


def test_empty_body_is_unknown_error():
    """Test empty body."""
    assert classify_login_response("").error == AuthErrorKind.UNKNOWN
    assert classify_login_response(None).error == AuthErrorKind.UNKNOWN


def test_is_login_page_by_url():
    """Test a redirect to the login form is detected from the URL."""
    url = "https://www.lesptitscageots.fr/authentification?back=historique-des-commandes"
    assert is_login_page("<html></html>", url) is True


def test_is_login_page_by_form():
    """Test the login form is detected in the page."""
    html = '<form action="/authentification" method="post" id="login_form"></form>'
    assert is_login_page(html, "https://www.lesptitscageots.fr/historique-des-commandes") is True


def test_order_history_is_not_login_page():
    """Test negative case."""
    html = '<table id="order-list"></table>'
    assert is_login_page(html, "https://www.lesptitscageots.fr/historique-des-commandes") is False
