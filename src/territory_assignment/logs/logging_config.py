# ============================================================
# 📦 src/territory_assignment/logs/logging_config.py
# ============================================================

import sys
from typing import Optional

from loguru import logger


def setup_logging(level: str = "INFO", arquivo: Optional[str] = None):
    """
    Substitui os sinks padrão do loguru por stdout colorido
    (e opcionalmente um arquivo rotativo).
    """
    logger.remove()
    logger.add(
        sys.stdout,
        colorize=True,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
    )

    if arquivo:
        logger.add(arquivo, level=level, rotation="10 MB", retention=5, encoding="utf-8")

    logger.debug(f"🔧 Logging configurado | level={level} | arquivo={arquivo}")
