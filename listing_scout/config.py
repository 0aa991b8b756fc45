# === FILE: listing_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации ListingScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import json
import os
import errno
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
    model_validator,
)

from listing_scout.errors import ConfigurationError

DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

DEFAULT_BLOCK_INDICATORS: List[str] = [
    "access denied",
    "captcha",
    "robot check",
    "verify you are a human",
    "please verify you are human",
    "pardon our interruption",
    "request has been blocked",
    "unusual traffic",
    "just a moment",
    "attention required",
    "checking your browser",
]


class SelectorConfig(BaseModel):
    """CSS-селекторы страницы результатов (данные, а не код)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    state_script: str = "script#__NEXT_DATA__"
    card: str = '[data-test="cardContent"]'
    year: str = '[data-test="vehicleCardYear"]'
    make: str = '[data-test="vehicleCardMake"]'
    model: str = '[data-test="vehicleCardModel"]'
    trim: str = '[data-test="vehicleCardTrim"]'
    price: str = '[data-test="vehicleCardPrice"]'
    mileage: str = '[data-test="vehicleCardMileage"]'
    location: str = '[data-test="vehicleCardLocation"]'
    link: str = 'a[data-test="vehicleCardLink"]'
    next_page: str = 'a[data-test="pagination-next"]'


class ScoutConfig(BaseModel):
    """Конфигурация для одного запуска сбора объявлений."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    start_url: Optional[HttpUrl] = Field(None, description="Готовый URL первой страницы.")
    base_url: HttpUrl = Field(
        "https://www.truecar.com/used-cars-for-sale/listings/",
        description="URL списка объявлений для построения первой страницы.",
    )
    origin: HttpUrl = Field("https://www.truecar.com", description="База для абсолютных ссылок.")

    make: str = Field("chevrolet", description="Марка автомобиля.")
    model: str = Field("malibu", description="Модель автомобиля.")
    year_min: Optional[int] = Field(None, ge=1900, le=2100)
    year_max: Optional[int] = Field(None, ge=1900, le=2100)
    zip: Optional[str] = Field(None, min_length=1)

    results_wanted: int = Field(20, ge=1, description="Сколько объявлений сохранить.")
    max_pages: int = Field(10, ge=1, description="Жесткий лимит по числу страниц.")
    concurrency: int = Field(5, ge=1, description="Одновременных запросов.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    retry_times: int = Field(3, ge=0, description="Число повторных попыток.")
    user_agents: List[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS), min_length=1)
    proxies: List[str] = Field(default_factory=list, description="Прокси, по кругу.")

    block_indicators: List[str] = Field(default_factory=lambda: list(DEFAULT_BLOCK_INDICATORS))
    block_policy: Literal["extract", "skip"] = Field(
        "extract", description="Что делать со страницей-заглушкой антибота."
    )
    page_param: str = Field("page", min_length=1)
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)

    output: Path = Field(Path("listings.jsonl"), description="Файл набора данных (JSON lines).")
    debug_dir: Path = Field(Path("debug"), description="Куда сохранять отладочные страницы.")

    @field_validator("make", "model", mode="before")
    def _lower_slug(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("zip", mode="before")
    def _zip_as_text(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("block_indicators")
    def _lower_indicators(cls, v: List[str]) -> List[str]:
        return [s.lower() for s in v if s.strip()]

    @model_validator(mode="after")
    def _check_year_range(self) -> ScoutConfig:
        if self.year_min is not None and self.year_max is not None and self.year_min > self.year_max:
            raise ValueError(f"year_min ({self.year_min}) > year_max ({self.year_max})")
        return self

    def with_overrides(self, **changes: Any) -> ScoutConfig:
        """Возвращает новую проверенную копию с изменёнными полями (None пропускается)."""
        data = self.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})
        return build_config(data)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}"
        )
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}"
        )
    return data


def build_config(data: dict[str, Any]) -> ScoutConfig:
    """Validate a raw mapping, turning pydantic errors into :class:`ConfigurationError`."""
    try:
        return ScoutConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_config(path: Union[str, Path, None]) -> ScoutConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScoutConfig.
    При отсутствии файла конфига бросает FileNotFoundError,
    при неверном содержимом - ConfigurationError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ConfigurationError(f"Неподдерживаемый формат конфига: {suffix}")

    return build_config(data)
