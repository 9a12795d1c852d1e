from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "STOCKCOUNT_DATA_DIR"
DB_FILE_NAME = "stock.db"
DEFAULT_SMTP_PORT = 587
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = DEFAULT_SMTP_PORT
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = ""
    admin_emails: tuple[str, ...] = field(default_factory=tuple)
    report_emails: tuple[str, ...] = field(default_factory=tuple)
    app_url: str = "http://localhost:8501"
    log_level: str = "INFO"

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)


def _default_data_dir() -> Path:
    return Path.home() / ".stockcount"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def _split_emails(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return tuple()
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def _parse_port(raw: Optional[str]) -> int:
    try:
        return int(raw) if raw else DEFAULT_SMTP_PORT
    except ValueError:
        return DEFAULT_SMTP_PORT


def resolve_data_dir(env: Mapping[str, str], override: Optional[str] = None) -> Path:
    # Priority order:
    # 1) Explicit override (Streamlit session state)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if override:
        data_dir = Path(override).expanduser().resolve()
    elif env.get(ENV_DATA_DIR):
        data_dir = Path(env[ENV_DATA_DIR]).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def load_settings(env: Optional[Mapping[str, str]] = None, *, data_dir: Optional[str] = None) -> Settings:
    env = os.environ if env is None else env
    resolved = resolve_data_dir(env, data_dir)

    smtp_user = env.get("SMTP_USER", "")
    admin_emails = _split_emails(env.get("ADMIN_EMAILS"))
    report_emails = _split_emails(env.get("REPORT_EMAILS")) or admin_emails

    return Settings(
        data_dir=resolved,
        db_path=resolved / DB_FILE_NAME,
        smtp_host=env.get("SMTP_HOST") or "smtp.gmail.com",
        smtp_port=_parse_port(env.get("SMTP_PORT")),
        smtp_user=smtp_user,
        smtp_password=env.get("SMTP_PASS", ""),
        email_from=env.get("EMAIL_FROM") or smtp_user,
        admin_emails=admin_emails,
        report_emails=report_emails,
        app_url=env.get("APP_URL") or "http://localhost:8501",
        log_level=(env.get("STOCKCOUNT_LOG_LEVEL") or "INFO").upper(),
    )


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = _default_data_dir() / CONFIG_FILE_NAME
    cfg.parent.mkdir(parents=True, exist_ok=True)
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state["stockcount_data_dir"] = str(data_dir)


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings(data_dir=st.session_state.get("stockcount_data_dir"))
    configure_logging(settings.log_level)
    return settings


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger("stockcount")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
