"""Classify login responses and detect login pages.

lesptitscageots.fr answers the login POST with HTTP 200 whether the
credentials are right or not, so the outcome is read from the page content.
"""
import html
import logging
from dataclasses import dataclass
from typing import Optional

from cageots.errors import AuthErrorKind

logger = logging.getLogger(__name__)

WELCOME_MARKER = "Bienvenue sur votre page d'accueil."

# Evaluated in order, first match wins
ERROR_MARKERS: list[tuple[str, AuthErrorKind]] = [
    ("Adresse e-mail requise", AuthErrorKind.MISSING_EMAIL),
    ("Adresse e-mail invalide", AuthErrorKind.INVALID_EMAIL),
    ("Mot de passe requis", AuthErrorKind.MISSING_PASSWORD),
    ("mot de passe non valable", AuthErrorKind.INVALID_PASSWORD),
    ("Échec d'authentification", AuthErrorKind.AUTHENTICATION_FAILED),
]


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a login attempt."""

    ok: bool
    error: Optional[AuthErrorKind] = None
    marker: Optional[str] = None


def _haystacks(response_html: str) -> tuple[str, ...]:
    # The site mixes raw accents and entities (&Eacute;, &#039;)
    unescaped = html.unescape(response_html)
    if unescaped == response_html:
        return (response_html,)
    return (response_html, unescaped)


def _contains(haystacks: tuple[str, ...], marker: str) -> bool:
    return any(marker in text for text in haystacks)


def classify_login_response(response_html: str | None) -> LoginResult:
    """Decide success or the failure reason from a login response body."""
    if not response_html:
        return LoginResult(ok=False, error=AuthErrorKind.UNKNOWN)

    haystacks = _haystacks(response_html)
    if _contains(haystacks, WELCOME_MARKER):
        return LoginResult(ok=True, marker=WELCOME_MARKER)

    for marker, kind in ERROR_MARKERS:
        if _contains(haystacks, marker):
            return LoginResult(ok=False, error=kind, marker=marker)

    return LoginResult(ok=False, error=AuthErrorKind.UNKNOWN)


def is_login_page(response_html: str | None, final_url: str) -> bool:
    """
    Detect if a response is the login form rather than the requested page.
    Happens when the session cookie was lost or expired.
    """
    if "authentification" in final_url.lower():
        return True

    if not response_html:
        return False

    return 'id="login_form"' in response_html or "id='login_form'" in response_html
