# bookmarket/utils.py
"""Shared utilities: logging setup and small text helpers."""
import os
import re
import logging
from dotenv import load_dotenv

load_dotenv()

_ANGLE_BRACKETS = re.compile(r"[<>]")


def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("bookmarket")


def strip_angle_brackets(value: str) -> str:
    """Drop `<` and `>` and surrounding whitespace from free text."""
    return _ANGLE_BRACKETS.sub("", value).strip()
