"""Merkezi ayarlar. .env dosyası proje kökünden yüklenir."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Proje kokundeki .env dosyasini bul ve yukle
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Geçersiz %s değeri: %r, varsayılan kullanılıyor: %s", name, raw, default)
        return default


@dataclass
class Settings:
    api_url: str = "http://localhost:3000"
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    timeout: float = 15.0
    page_size: int = 10
    audit_bucket: Optional[str] = None
    region_name: str = "us-east-1"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_url=os.environ.get("STOCKROOM_API_URL", cls.api_url),
            access_token=os.environ.get("STOCKROOM_ACCESS_TOKEN") or None,
            refresh_token=os.environ.get("STOCKROOM_REFRESH_TOKEN") or None,
            timeout=_env_number("STOCKROOM_TIMEOUT", cls.timeout, float),
            page_size=_env_number("STOCKROOM_PAGE_SIZE", cls.page_size, int),
            audit_bucket=os.environ.get("STOCKROOM_AUDIT_BUCKET") or None,
            region_name=os.environ.get("AWS_DEFAULT_REGION", cls.region_name),
            log_level=os.environ.get("STOCKROOM_LOG_LEVEL", cls.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # Kutuphane loglarini biraz kisalim
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
