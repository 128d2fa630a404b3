# === FILE: webgrep/config.py ===
"""
Модуль для загрузки и валидации конфигурации WebGrep.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from webgrep.matcher import MatchMode

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/121.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
)
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.9,bs;q=0.8,sr;q=0.7,hr;q=0.6"


class ConfigurationError(ValueError):
    """Запуск невозможен: конфигурация некорректна (например, seed URL)."""


class CrawlConfig(BaseModel):
    """Неизменяемая конфигурация одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(..., min_length=1, description="Стартовый URL.")
    keyword: str = Field(..., min_length=1, description="Искомое слово или фраза.")
    depth: int = Field(1, ge=0, description="Максимальная глубина обхода ссылок.")
    mode: MatchMode = Field(MatchMode.DEFAULT, description="Режим сравнения: default, exact, fuzzy.")
    max_pages: int = Field(5000, gt=0, description="Жесткий лимит по числу страниц.")
    max_bytes: int = Field(DEFAULT_MAX_BYTES, gt=0, description="Лимит размера ответа (байт).")
    timeout_ms: int = Field(20000, ge=0, description="Таймаут на один запрос (мс), 0 - без лимита.")
    allow_external: bool = Field(False, description="Переходить на внешние домены.")
    insecure_tls: bool = Field(False, description="Не проверять TLS-сертификаты.")
    delay_ms: int = Field(100, ge=0, description="Пауза между запросами к одному хосту (мс).")
    concurrency: int = Field(1, ge=1, description="Число параллельных воркеров.")
    max_links_per_page: int = Field(5000, ge=1, description="Лимит ссылок с одной страницы.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    accept: str = Field(DEFAULT_ACCEPT, description="Заголовок Accept.")
    accept_language: str = Field(DEFAULT_ACCEPT_LANGUAGE, description="Заголовок Accept-Language.")
    ignored_link_patterns: List[str] = Field(
        default_factory=list, description="Дополнительные подстроки для отбрасывания ссылок."
    )
    skip_content_types: List[str] = Field(
        default_factory=lambda: ["image/", "audio/", "video/", "font/"],
        description="Префиксы Content-Type, которые не обрабатываются.",
    )

    @field_validator("url", "keyword", mode="before")
    def _strip(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("mode", mode="before")
    def _lower_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def timeout_seconds(self) -> float | None:
        return self.timeout_ms / 1000 if self.timeout_ms else None


_DEFAULT_CFG = Path("webgrep.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path, None]) -> Dict[str, Any]:
    """
    Читает YAML или JSON и возвращает сырые настройки.
    Без пути используется ./webgrep.yaml, если он есть; иначе пустой словарь.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return {}
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def build_config(data: Dict[str, Any], **overrides: Any) -> CrawlConfig:
    """Накладывает переопределения (значения None пропускаются) и валидирует."""
    merged = dict(data)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return CrawlConfig(**merged)


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlConfig:
    """
    Возвращает проверенный CrawlConfig: настройки из файла,
    поверх них - переопределения из CLI.
    """
    return build_config(read_config_file(path), **overrides)
