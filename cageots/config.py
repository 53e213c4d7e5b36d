"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

from cageots.errors import ConfigError

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
FILES_DIR = Path(os.getenv("FILES_DIR", str(DATA_DIR / "bills")))
STATE_DB = DATA_DIR / "state.db"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)

VENDOR = "Les ptits cageots"

# Only these statuses guarantee that an invoice document exists
ACCEPTED_STATUSES: tuple[str, ...] = ("Commande traitée",)
LEGACY_ACCEPTED_STATUSES: tuple[str, ...] = ("Commande passée", "Commande traitée")

DEFAULT_BANK_IDENTIFIERS: tuple[str, ...] = ("Les P Tits Cag",)
DEDUP_KEYS: tuple[str, ...] = ("vendorRef", "date", "amount")


def _split(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not value:
        return default
    parts = tuple(part.strip() for part in value.split("|") if part.strip())
    return parts or default


class Config:
    """Application configuration."""

    # Les P'tits Cageots
    BASE_URL: str = os.getenv("BASE_URL", "https://www.lesptitscageots.fr")
    LOGIN: str | None = os.getenv("LOGIN")
    PASSWORD: str | None = os.getenv("PASSWORD")
    COZY_PARAMETERS: str | None = os.getenv("COZY_PARAMETERS")

    # Connector
    ACCEPTED_STATUSES: tuple[str, ...] = _split(os.getenv("ACCEPTED_STATUSES"), ACCEPTED_STATUSES)
    BANK_IDENTIFIERS: tuple[str, ...] = _split(os.getenv("BANK_IDENTIFIERS"), DEFAULT_BANK_IDENTIFIERS)
    RATE_PER_DOMAIN: float = float(os.getenv("RATE_PER_DOMAIN", "2.0"))
    TIMEOUT: int = int(os.getenv("TIMEOUT", "20"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))

    # Supabase (optional mirror of saved bills)
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE: str | None = os.getenv("SUPABASE_SERVICE_ROLE")
    SUPABASE_TABLE: str = os.getenv("SUPABASE_TABLE", "cageots_bills")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API Security
    API_KEY: str | None = os.getenv("API_KEY")

    @classmethod
    def validate(cls, require_supabase: bool = False) -> None:
        """Validate required configuration."""
        errors = []
        if not cls.LOGIN:
            errors.append("LOGIN is required")
        if not cls.PASSWORD:
            errors.append("PASSWORD is required")
        if require_supabase:
            if not cls.SUPABASE_URL:
                errors.append("SUPABASE_URL is required")
            if not cls.SUPABASE_SERVICE_ROLE:
                errors.append("SUPABASE_SERVICE_ROLE is required")
        if errors:
            raise ConfigError(f"Configuration errors: {', '.join(errors)}")

    @classmethod
    def supabase_enabled(cls) -> bool:
        return bool(cls.SUPABASE_URL and cls.SUPABASE_SERVICE_ROLE)


config = Config()
