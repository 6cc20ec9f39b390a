########## ini_config.py

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

INI_DEFAULT_NAME = "netlog_web.ini"

# Credentials are read from the environment only, never from the INI.
API_KEY_ENVS = ("GEMINI_API_KEY", "API_KEY")
DB_URL_ENV = "NETLOG_DB_URL"
DB_KEY_ENV = "NETLOG_DB_KEY"


@dataclass(frozen=True)
class AppSettings:
    flask_host: str
    flask_port: int
    flask_debug: bool

    model: str
    report_language: str

    history_table: str
    history_limit: int
    db_login_timeout_seconds: int

    api_key: str = ""
    db_url: str = ""
    db_key: str = ""

    @property
    def analysis_enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def history_enabled(self) -> bool:
        return bool(self.db_url and self.db_key)


class IniConfig:
    """
    Adapter around ConfigParser and the process environment.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Optional[Path], env: Optional[Mapping[str, str]] = None):
        self._ini_path = ini_path
        self._env = os.environ if env is None else env
        self._cfg = ConfigParser()
        if ini_path is not None:
            read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
            if not read_ok:
                raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default(env: Optional[Mapping[str, str]] = None) -> "IniConfig":
        env = os.environ if env is None else env
        ini_raw = (env.get("APP_INI") or "").strip()
        if ini_raw:
            return IniConfig(Path(ini_raw), env)

        # Without APP_INI the repo-root INI is optional; built-in defaults apply.
        default_path = Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME
        return IniConfig(default_path if default_path.is_file() else None, env)

    def _env_str(self, *names: str) -> str:
        for name in names:
            raw = (self._env.get(name) or "").strip()
            if raw:
                return raw
        return ""

    def load_settings(self) -> AppSettings:
        # Flask
        flask_host = (self._cfg.get("flask", "host", fallback="127.0.0.1") or "").strip() or "127.0.0.1"
        flask_port = self._cfg.getint("flask", "port", fallback=5000)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=False)

        # Analysis
        model = (self._cfg.get("analysis", "model", fallback="gemini-2.5-flash") or "").strip() or "gemini-2.5-flash"
        report_language = (self._cfg.get("analysis", "report_language", fallback="English") or "").strip() or "English"

        # History
        history_table = (self._cfg.get("history", "table_name", fallback="analysis_history") or "").strip() or "analysis_history"
        history_limit = self._cfg.getint("history", "limit", fallback=20)
        db_login_timeout_seconds = self._cfg.getint("history", "login_timeout_seconds", fallback=15)

        # Validate
        if history_limit <= 0:
            raise ValueError(f"history.limit must be positive, got {history_limit}")

        return AppSettings(
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            model=model,
            report_language=report_language,
            history_table=history_table,
            history_limit=history_limit,
            db_login_timeout_seconds=db_login_timeout_seconds,
            api_key=self._env_str(*API_KEY_ENVS),
            db_url=self._env_str(DB_URL_ENV),
            db_key=self._env_str(DB_KEY_ENV),
        )
