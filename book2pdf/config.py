# === FILE: book2pdf/config.py ===
"""
Модуль для загрузки и валидации конфигурации book2pdf.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Union
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from book2pdf.utils import domain_slug


class PrintOptions(BaseModel):
    """Параметры печати страницы в PDF (поля в дюймах)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    scale: float = Field(0.75, ge=0.1, le=2.0, description="Масштаб рендеринга.")
    margin_top: float = Field(0.0, ge=0)
    margin_right: float = Field(0.0, ge=0)
    margin_bottom: float = Field(0.0, ge=0)
    margin_left: float = Field(0.0, ge=0)
    print_background: bool = True

    def to_pdf_kwargs(self) -> Dict[str, Any]:
        """Аргументы для ``Page.pdf()`` рендерера."""
        return {
            "scale": self.scale,
            "print_background": self.print_background,
            "margin": {
                "top": f"{self.margin_top}in",
                "right": f"{self.margin_right}in",
                "bottom": f"{self.margin_bottom}in",
                "left": f"{self.margin_left}in",
            },
        }


class SettleDelays(BaseModel):
    """Паузы (секунды) для клиентского рендеринга после навигации."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    root: float = Field(3.0, ge=0, description="После открытия корня сайта.")
    navigation: float = Field(2.0, ge=0, description="После любой другой навигации.")
    menu: float = Field(2.0, ge=0, description="После раскрытия меню.")
    content: float = Field(1.0, ge=0, description="После загрузки синтетической обложки.")


class DownloadConfig(BaseModel):
    """Конфигурация одного запуска download."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(..., description="Корневой URL документации.")
    out_dir: Path = Field(Path("output_book2pdf"), description="Каталог для результатов.")
    combine: bool = Field(True, description="Склеивать страницы в один PDF.")
    preserve_pages: bool = Field(False, description="Не удалять постраничные PDF после склейки.")
    timeout: float = Field(30.0, ge=0, description="Таймаут навигации (секунд), 0 отключает таймаут.")
    headless: bool = True
    viewport_width: int = Field(1920, ge=1)
    viewport_height: int = Field(1080, ge=1)
    print_options: PrintOptions = Field(default_factory=PrintOptions)
    settle: SettleDelays = Field(default_factory=SettleDelays)

    @field_validator("url")
    def _check_scheme(cls, v: str) -> str:
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"URL must be an absolute http(s) address, got {v!r}")
        return v.strip()

    @property
    def pages_dir(self) -> Path:
        return self.out_dir / "pages"

    @property
    def combined_path(self) -> Path:
        return self.out_dir / f"{domain_slug(self.url)}-combined.pdf"

    @property
    def timeout_ms(self) -> float:
        return self.timeout * 1000


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """
    Читает YAML или JSON с переопределениями DownloadConfig и возвращает словарь.
    Проверка схемы выполняется при сборке DownloadConfig (см. :func:`build_config`).
    """
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def build_config(
    url: str,
    config_path: Union[str, Path, None] = None,
    **overrides: Any,
) -> DownloadConfig:
    """Собирает DownloadConfig: значения из файла, поверх них параметры CLI."""
    data: dict[str, Any] = load_config(config_path) if config_path is not None else {}
    data.update({k: v for k, v in overrides.items() if v is not None})
    data["url"] = url
    return DownloadConfig(**data)


__all__ = [
    "PrintOptions",
    "SettleDelays",
    "DownloadConfig",
    "load_config",
    "build_config",
]
