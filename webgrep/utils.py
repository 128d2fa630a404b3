# File: webgrep/utils.py
"""webgrep.utils: Канонизация URL и мелкие утилиты для работы со ссылками."""

from __future__ import annotations

import re
from typing import Dict, Optional, Sequence
from urllib.parse import urljoin, urlsplit

from webgrep.logger import logger

__all__: Sequence[str] = (
    "DEFAULT_PORTS",
    "normalize_url",
    "extract_host",
)

DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443, "ftp": 21}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_SLASH_RUN_RE = re.compile(r"/{2,}")


def _absolutize(raw: str, base: Optional[str]) -> str:
    """Превращает относительную ссылку в абсолютную (без разбора результата)."""
    url = raw
    if url.startswith("//"):
        scheme = "https" if base and base.startswith("https") else "http"
        url = f"{scheme}:{url}"

    if _SCHEME_RE.match(url):
        return url

    if base:
        try:
            return urljoin(base, url)
        except ValueError:
            pass
    if not url.startswith("http"):
        url = "http://" + url
    return url


def normalize_url(raw: Optional[str], base: Optional[str] = None) -> str:
    """
    Нормализует URL относительно base: схема и хост в нижнем регистре,
    порт по умолчанию убран, пустой путь -> "/", повторные слеши схлопнуты,
    query сохраняется как есть, фрагмент отбрасывается.

    Никогда не бросает исключений: для ссылок без хоста возвращает "".
    """
    if not raw:
        return ""
    url = _absolutize(raw.strip(), base)

    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
        port = parts.port
    except ValueError:
        # битый порт или скобки IPv6: отдаём то, что получилось
        logger.debug("Lenient URL fallback: %s", url)
        return url

    if not host:
        return ""

    scheme = parts.scheme.lower()
    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"

    path = _SLASH_RUN_RE.sub("/", parts.path or "/")
    if not path.startswith("/"):
        path = "/" + path

    normalized = f"{scheme}://{netloc}{path}"
    if parts.query:
        normalized += "?" + parts.query
    return normalized


def extract_host(url: str) -> str:
    """Возвращает хост URL в нижнем регистре ("" если его нет или URL битый)."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""
