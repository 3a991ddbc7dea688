"""
Logging configuration for safe-migrate.

Supports two output formats:
  - **human** – coloured, single-line, readable
  - **json**  – newline-delimited JSON for log aggregators

Every handler installed by :func:`setup_logging` carries a
:class:`SecretFilter`.  It masks anything in a record (message or
traceback) that looks like key material:

  - a run of twelve or more BIP-39 English words (a recovery phrase)
  - a bare 64-digit hex string (a raw private key)

``0x``-prefixed hex is left alone so that addresses, digests and
transaction hashes stay readable.

Usage:
    from safe_migrate.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="migrate.log")
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path

from mnemonic import Mnemonic

PHRASE_MASK = "[REDACTED PHRASE]"
KEY_MASK = "[REDACTED KEY]"
MIN_PHRASE_WORDS = 12

_WORD_RUN = re.compile(r"[A-Za-z]+(?:\s+[A-Za-z]+){%d,}" % (MIN_PHRASE_WORDS - 1))
_BARE_KEY = re.compile(r"(?<![0-9A-Fa-fxX])[0-9A-Fa-f]{64}(?![0-9A-Fa-f])")

_WORDS: frozenset[str] | None = None


def _wordlist() -> frozenset[str]:
    global _WORDS
    if _WORDS is None:
        _WORDS = frozenset(Mnemonic("english").wordlist)
    return _WORDS


def _mask_phrases(match: re.Match) -> str:
    known = _wordlist()
    out: list[str] = []
    run: list[str] = []
    for word in match.group(0).split() + [""]:
        if word and word.lower() in known:
            run.append(word)
            continue
        if run:
            out.append(PHRASE_MASK if len(run) >= MIN_PHRASE_WORDS else " ".join(run))
            run = []
        if word:
            out.append(word)
    return " ".join(out)


def redact(text: str) -> str:
    """Mask recovery phrases and bare private keys in *text*."""
    text = _WORD_RUN.sub(_mask_phrases, text)
    return _BARE_KEY.sub(KEY_MASK, text)


class SecretFilter(logging.Filter):
    """Rewrite a record's message and traceback through :func:`redact`."""

    _tracebacks = logging.Formatter()

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact(record.getMessage())
        record.args = None
        if record.exc_info and record.exc_info[1] and not record.exc_text:
            record.exc_text = self._tracebacks.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = redact(record.exc_text)
        return True


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_text:
            log_obj["exception"] = record.exc_text
        elif record.exc_info and record.exc_info[1]:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    """Coloured, concise single-line format."""

    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, colour: bool = True):
        super().__init__()
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"[{record.levelname:<7}]"
        if self.colour:
            level = f"{self.COLOURS.get(record.levelname, '')}{level}{self.RESET}"
        return f"{ts} {level} {record.name}: {record.getMessage()}"


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: str | None = None,
) -> None:
    """
    Configure the root logger for the command-line runner.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    fmt : str
        ``"human"`` for coloured single-line output on a terminal,
        ``"json"`` for newline-delimited JSON.
    log_file : str, optional
        If provided, logs are *also* written to this file (always JSON).

    Both handlers redact key material through :class:`SecretFilter`.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        console.setFormatter(_JSONFormatter())
    else:
        console.setFormatter(_HumanFormatter(colour=sys.stderr.isatty()))
    console.addFilter(SecretFilter())
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        fh.addFilter(SecretFilter())
        root.addHandler(fh)
