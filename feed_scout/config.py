# === FILE: feed_scout/config.py ===
"""
Модуль для загрузки и валидации параметров поиска фидов FeedScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

StrategyName = Literal["meta", "anchors", "blind", "deep", "sitemap"]


class SearchOptions(BaseModel):
    """Неизменяемая конфигурация одного сеанса поиска фидов."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок (deep search).")
    max_links: int = Field(1000, ge=1, description="Жесткий лимит по числу посещаемых ссылок.")
    timeout: float = Field(5.0, gt=0, description="Таймаут на один запрос (секунд).")
    keep_query_params: bool = Field(False, description="Сохранять query string сайта в кандидатах.")
    check_foreign_feeds: bool = Field(False, description="Проверять ссылки на чужие домены (без обхода).")
    max_errors: int = Field(5, ge=1, description="Число ошибок, после которого обход прекращается.")
    max_feeds: int = Field(0, ge=0, description="Остановиться после N фидов (0 = без лимита).")
    stop_at_first: bool = Field(True, description="Остановиться на первой успешной стратегии.")
    concurrency: int = Field(5, ge=1, description="Число параллельных воркеров краулера.")
    strategy: Optional[StrategyName] = Field(None, description="Запустить только одну стратегию.")
    deep_search: bool = Field(False, description="Включить deep search в последовательном режиме.")
    show_errors: bool = Field(False, description="Публиковать некритичные ошибки как события error.")
    follow_meta_refresh: bool = Field(True, description="Следовать одному <meta http-equiv=refresh>.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout * 1000)

    @property
    def collect_all(self) -> bool:
        """Режим накопления: обратное значение ``stop_at_first``."""
        return not self.stop_at_first

    def with_overrides(self, **changes: Any) -> SearchOptions:
        """Возвращает новый проверенный объект с заменёнными полями (None игнорируется)."""
        data = self.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})
        return SearchOptions.model_validate(data)


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


def load_config(path: Union[str, Path, None]) -> SearchOptions:
    """
    Читает YAML или JSON и возвращает проверенный объект SearchOptions.
    Без пути возвращает значения по умолчанию; отсутствующий файл → FileNotFoundError.
    """
    if path is None:
        return SearchOptions()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return SearchOptions(**data)


__all__ = ["SearchOptions", "StrategyName", "DEFAULT_USER_AGENT", "load_config"]
