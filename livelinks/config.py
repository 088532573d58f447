"""
livelinks/config.py

运行配置
从环境变量（前缀 LIVELINKS_）或 .env 文件读取配置
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """库设置"""

    # 调试
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    # 事件分发
    ISOLATE_HANDLER_ERRORS: bool = False  # True: log and record handler failures instead of raising
    TRACE_EVENTS: bool = False

    model_config = SettingsConfigDict(
        env_prefix="LIVELINKS_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """获取全局设置（缓存）"""
    return Settings()


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Apply the configured log level to the livelinks logger namespace.

    Args:
        level: Explicit level name; None uses Settings.LOG_LEVEL
               (DEBUG forces "DEBUG").

    Returns:
        The package root logger.
    """
    current = get_settings()
    if level is None:
        level = "DEBUG" if current.DEBUG else current.LOG_LEVEL

    root = logging.getLogger("livelinks")
    root.setLevel(level.upper())
    return root


# 全局设置实例
settings = get_settings()


__all__ = ["Settings", "get_settings", "configure_logging", "settings"]
