"""URL builders for lesptitscageots.fr endpoints."""
from urllib.parse import urljoin

from cageots.config import config


def login_url(base: str | None = None) -> str:
    """Get the login form action URL."""
    return f"{(base or config.BASE_URL).rstrip('/')}/authentification"


def order_history_url(base: str | None = None) -> str:
    """Get the order history (listing) URL."""
    return f"{(base or config.BASE_URL).rstrip('/')}/historique-des-commandes"


def absolute_url(href: str, base: str | None = None) -> str:
    """Resolve an href found in a page against the site root."""
    return urljoin(f"{(base or config.BASE_URL).rstrip('/')}/", href)
