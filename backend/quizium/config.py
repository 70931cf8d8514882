from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    vault_dir: Path = Path.home() / ".quizium" / "vault"
    data_dir: Path = Path.home() / ".quizium" / "data"
    sqlite_filename: str = "quizium.db"
    notes_glob: str = "**/*.md"
    host: str = "127.0.0.1"
    port: int = 0  # 0 = pick a free port and print it
    log_level: str = "warning"
    # Initial spaced repetition waits (days) until changed through /settings
    easy_days: int = 4
    moderate_days: int = 2
    challenging_days: int = 0  # 0 = challenging cards are always due

    model_config = {"env_prefix": "QUIZIUM_"}


settings = Settings()
