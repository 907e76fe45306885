import os
from dataclasses import dataclass

from dotenv import load_dotenv

from static_site import NOT_FOUND_BEHAVIORS, FALLBACK_TO_INDEX

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ─── DEFAULTS ─────────────────────────────────────────────────────
DEFAULT_KEY_FILE = os.path.join(BASE_DIR, "service-account.json")
DEFAULT_SHEET_ID = "1bQd-wL3I4W2dBu68TNeuhwSxlLwePIPdmZtl7a6lI8U"
DEFAULT_RANGE = "Página1!A:F"  # sheet name and columns new rows land in
DEFAULT_PORT = 3000
DEFAULT_STATIC_ROOT = os.path.join(BASE_DIR, "public")
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    key_file: str = DEFAULT_KEY_FILE
    sheet_id: str = DEFAULT_SHEET_ID
    cell_range: str = DEFAULT_RANGE
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    static_root: str = DEFAULT_STATIC_ROOT
    not_found_behavior: str = FALLBACK_TO_INDEX
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None, dotenv=True) -> "Settings":
        """
        Build settings from environment variables, falling back to the
        literal defaults above for anything unset. A `.env` file in the
        working directory is loaded first unless `dotenv` is False.
        """
        if dotenv:
            load_dotenv()
        env = os.environ if environ is None else environ

        behavior = env.get("NOT_FOUND_BEHAVIOR", FALLBACK_TO_INDEX)
        if behavior not in NOT_FOUND_BEHAVIORS:
            raise ValueError(
                f"NOT_FOUND_BEHAVIOR must be one of {', '.join(NOT_FOUND_BEHAVIORS)}, got '{behavior}'"
            )

        return cls(
            key_file=env.get("SERVICE_ACCOUNT_KEY_FILE", DEFAULT_KEY_FILE),
            sheet_id=env.get("SHEET_ID", DEFAULT_SHEET_ID),
            cell_range=env.get("RANGE", DEFAULT_RANGE),
            host=env.get("HOST", "0.0.0.0"),
            port=_to_number(env, "PORT", DEFAULT_PORT, int),
            static_root=env.get("STATIC_ROOT", DEFAULT_STATIC_ROOT),
            not_found_behavior=behavior,
            http_timeout=_to_number(env, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT, float),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def _to_number(env, name, default, kind):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a {kind.__name__}, got '{raw}'") from None
