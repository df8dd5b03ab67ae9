import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_URL = "https://codeforces.com/api"


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "cfdaily_data.json"
    application_id: int | None = None
    codeforces_api_url: str = DEFAULT_API_URL
    codeforces_timeout: float = 30.0
    # Sync the slash command table with Discord on every start
    sync_commands: bool = True


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "t", "yes")


def load_settings() -> Settings:
    load_dotenv()
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    app_id = os.getenv("DISCORD_APPLICATION_ID", "").strip()
    timeout = os.getenv("CODEFORCES_TIMEOUT", "").strip()
    return Settings(
        token=token or "",
        data_path=os.getenv("CFDAILY_DATA_PATH", "").strip() or "cfdaily_data.json",
        application_id=int(app_id) if app_id.isdigit() else None,
        codeforces_api_url=os.getenv("CODEFORCES_API_URL", "").strip() or DEFAULT_API_URL,
        codeforces_timeout=float(timeout) if timeout else 30.0,
        sync_commands=_env_flag("CFDAILY_SYNC_COMMANDS", True),
    )
