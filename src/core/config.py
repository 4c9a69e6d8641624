"""Configuration read from the environment (and a .env file, if present)"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str
    judge_email: str
    master_file_path: Optional[str]
    log_level: str
    sql_echo: bool


def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./game_states.db"),
        judge_email=os.getenv("DIP_JUDGE_EMAIL", "judge@example.com"),
        master_file_path=os.getenv("DIP_MASTER_PATH"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        sql_echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
