"""
PDF Processing Service — 配置模块
所有设置从环境变量加载，启动时构建一次 Settings 并传入应用工厂。

环境文件加载规则:
1. 根据 APP_ENV 环境变量决定加载 .env.development 或 .env.production
2. 如果 APP_ENV 未设置，默认为 development
3. 搜索路径：当前目录 → 项目根目录
"""

import logging
import os
from pathlib import Path
from typing import List, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("pdf_service.config")

_this_dir = Path(__file__).resolve().parent
_project_root = _this_dir.parent

MIB = 1024 * 1024


def load_env_files(app_env: str) -> bool:
    """按 APP_ENV 加载 .env 文件，返回是否找到了任何文件。"""
    search_dirs = [_this_dir, _project_root]
    env_filename = f".env.{app_env}"

    for base in search_dirs:
        env_file = base / env_filename
        if env_file.is_file():
            load_dotenv(env_file, override=True)
            logger.info(f"Loaded env file: {env_file} (APP_ENV={app_env})")
            return True

    # 兜底：尝试加载 .env 和 .env.local
    loaded = False
    for base in search_dirs:
        env_file = base / ".env"
        env_local = base / ".env.local"
        if env_file.is_file():
            load_dotenv(env_file, override=True)
            loaded = True
        if env_local.is_file():
            load_dotenv(env_local, override=True)
            loaded = True

    if not loaded:
        load_dotenv()
        logger.warning("No .env file found, using process environment only")
    return loaded


class Settings(BaseModel):
    """服务运行配置（不可变）。"""

    model_config = ConfigDict(frozen=True)

    app_env: Literal["development", "production"] = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # ── 上传 ─────────────────────────────────────────
    upload_storage: Literal["memory", "disk"] = "memory"
    upload_dir: Path = Path("./uploads")
    max_file_size: int = Field(default=10 * MIB, gt=0)
    max_request_size: int = Field(default=10 * MIB, gt=0)

    # ── 翻译（MyMemory）──────────────────────────────
    translate_api_url: str = "https://api.mymemory.translated.net/get"
    translate_timeout: float = Field(default=10.0, ge=5.0, le=10.0)
    translate_max_chars: int = Field(default=500, gt=0)
    translate_default_from: str = "auto"
    translate_default_to: str = "en"
    mymemory_email: str = ""

    # ── HTTP ────────────────────────────────────────
    cors_origins: List[str] = ["*"]
    # slowapi 限流表达式，例如 "60/minute"；空字符串表示关闭
    rate_limit: str = ""

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings() -> Settings:
    """从环境变量（及 .env 文件）构建 Settings，启动时调用一次。"""
    app_env = os.getenv("APP_ENV", "development")
    load_env_files(app_env)

    return Settings(
        app_env=os.getenv("APP_ENV", app_env),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        upload_storage=os.getenv("UPLOAD_STORAGE", "memory").lower(),
        upload_dir=Path(os.getenv("UPLOAD_DIR", "./uploads")),
        max_file_size=int(os.getenv("MAX_FILE_SIZE", str(10 * MIB))),
        max_request_size=int(os.getenv("MAX_REQUEST_SIZE", str(10 * MIB))),
        translate_api_url=os.getenv(
            "TRANSLATE_API_URL", "https://api.mymemory.translated.net/get"
        ),
        translate_timeout=float(os.getenv("TRANSLATE_TIMEOUT", "10")),
        translate_max_chars=int(os.getenv("TRANSLATE_MAX_CHARS", "500")),
        translate_default_from=os.getenv("TRANSLATE_DEFAULT_FROM", "auto"),
        translate_default_to=os.getenv("TRANSLATE_DEFAULT_TO", "en"),
        mymemory_email=os.getenv("MYMEMORY_EMAIL", ""),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
        rate_limit=os.getenv("RATE_LIMIT", "60/minute").strip(),
    )
