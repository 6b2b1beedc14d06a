from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from utils.paths import get_data_dir


def _get_config_path() -> Path:
    return get_data_dir() / "config.json"


@dataclass
class AppConfig:
    openai_api_key: str = ""
    openai_base_url: str = ""
    vision_model: str = "gpt-4o"
    answer_model: str = "o1-preview"
    monitor_index: int = 0
    font_size: int = 20
    indicator_size: int = 25
    # None 表示不设超时
    request_timeout: Optional[float] = None


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    config_path = config_path or _get_config_path()
    if not config_path.exists():
        config = AppConfig()
        save_config(config, config_path)
        logging.info("[Config] 未找到配置文件，已写入默认配置: %s", config_path)
        return config
    data = json.loads(config_path.read_text(encoding="utf-8"))
    valid_keys = {f.name for f in fields(AppConfig)}
    filtered = {k: v for k, v in data.items() if k in valid_keys}
    ignored = sorted(set(data) - valid_keys)
    if ignored:
        logging.warning("[Config] 忽略未知配置项: %s", ", ".join(ignored))
    return AppConfig(**filtered)


def save_config(config: AppConfig, config_path: Optional[Path] = None) -> None:
    config_path = config_path or _get_config_path()
    config_path.write_text(json.dumps(asdict(config), ensure_ascii=False, indent=2), encoding="utf-8")
