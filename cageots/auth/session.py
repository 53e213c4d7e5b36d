"""Form login against lesptitscageots.fr with cookie persistence."""
import logging
from typing import Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from cageots.auth.login_detector import LoginResult, classify_login_response
from cageots.errors import AuthenticationError, AuthErrorKind
from cageots.fetch.endpoints import login_url

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    AuthErrorKind.MISSING_EMAIL: "Adresse e-mail requise",
    AuthErrorKind.INVALID_EMAIL: "Adresse e-mail invalide",
    AuthErrorKind.MISSING_PASSWORD: "Mot de passe requis",
    AuthErrorKind.INVALID_PASSWORD: "mot de passe non valable",
    AuthErrorKind.AUTHENTICATION_FAILED: "Échec d'authentification",
    AuthErrorKind.UNKNOWN: "erreur inconnue",
}


class Authenticator:
    """Submits the login form on the run's client.

    The client's cookie jar keeps the session for every later request of
    the same run.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: Optional[str] = None):
        self.client = client
        self.base_url = base_url
        self._authenticated = False

    async def authenticate(self, username: str, password: str) -> LoginResult:
        """Post credentials and classify the response. Never raises on a refused login."""
        form_data = {
            "email": username,
            "passwd": password,
            "back": "",
            "SubmitLogin": "",
        }
        response = await self._login_request(form_data)
        result = classify_login_response(response.text)

        if result.ok:
            self._authenticated = True
            logger.info("Successfully logged in")
        else:
            self._authenticated = False
            logger.error(
                f"Login refused ({result.error.value}): {ERROR_MESSAGES.get(result.error, result.error.value)}"
            )
        return result

    async def login(self, username: str, password: str) -> None:
        """Authenticate or raise AuthenticationError."""
        logger.info(f"Authenticating as {username}...")
        result = await self.authenticate(username, password)
        if not result.ok:
            raise AuthenticationError(result.error)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def _login_request(self, form_data: dict) -> httpx.Response:
        """Make login request with retries on transport errors."""
        url = login_url(self.base_url)
        logger.debug(f"Login URL: {url}")
        response = await self.client.post(url, data=form_data, follow_redirects=True)
        # 200 for both outcomes; only 5xx and the like are transport level
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    def is_authenticated(self) -> bool:
        """Check if the last login attempt succeeded."""
        return self._authenticated
