"""
Runtime configuration from environment variables.

Load order: .env.local (local dev, highest priority), then .env, then the
process environment. Values are read when get_settings() is first called.

Variables:
    LEXSEARCH_INDEX_PATH   Persisted index file (default: index.json)
    LEXSEARCH_ADDRESS      host:port for the HTTP server (default: 127.0.0.1:6969)
    LEXSEARCH_TOP_N        Results returned per search request (default: 20)
    LEXSEARCH_STATIC_DIR   Directory holding index.html / index.js
    LOG_LEVEL              Console log level (default: INFO)
    LOG_FILE               Session log base path, empty to disable (default: logs/lexsearch.log)
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1:6969"
DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


def load_env_files(root: Optional[Path] = None) -> Optional[Path]:
    """Load .env.local or .env from root (cwd by default); return the file used"""
    root = root or Path.cwd()
    env_local = root / ".env.local"
    env_file = root / ".env"

    if env_local.exists():
        load_dotenv(env_local, override=True)
        return env_local
    if env_file.exists():
        load_dotenv(env_file, override=True)
        return env_file
    return None


def parse_address(address: str) -> Tuple[str, int]:
    """Split "host:port" into its parts"""
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Invalid address {address!r}, expected host:port")
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Invalid port in address {address!r}") from None


@dataclass
class Settings:
    index_path: Path = Path("index.json")
    address: str = DEFAULT_ADDRESS
    top_n: int = 20
    static_dir: Path = DEFAULT_STATIC_DIR
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/lexsearch.log"
    env_file: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_env(cls) -> "Settings":
        env_file = load_env_files()
        if env_file:
            logger.debug(f"Loaded environment from {env_file}")

        top_n_value = os.getenv("LEXSEARCH_TOP_N", "20")
        try:
            top_n = int(top_n_value)
        except ValueError:
            raise ValueError(f"LEXSEARCH_TOP_N must be an integer, got {top_n_value!r}") from None
        if top_n < 1:
            raise ValueError(f"LEXSEARCH_TOP_N must be >= 1, got {top_n}")

        address = os.getenv("LEXSEARCH_ADDRESS", DEFAULT_ADDRESS)
        parse_address(address)

        return cls(
            index_path=Path(os.getenv("LEXSEARCH_INDEX_PATH", "index.json")),
            address=address,
            top_n=top_n,
            static_dir=Path(os.getenv("LEXSEARCH_STATIC_DIR", str(DEFAULT_STATIC_DIR))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE", "logs/lexsearch.log") or None,
            env_file=env_file,
        )

    @property
    def console_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
