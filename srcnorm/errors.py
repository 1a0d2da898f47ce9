from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


OK = 0
ERR_CONFIG = 2
ERR_READ = 3
ERR_WRITE = 4


@dataclass
class NormalizerError(Exception):
    message: str
    path: Optional[str] = None
    code: int = ERR_CONFIG

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


@dataclass
class ConfigError(NormalizerError):
    code: int = ERR_CONFIG


@dataclass
class SourceReadError(NormalizerError):
    code: int = ERR_READ


@dataclass
class OutputWriteError(NormalizerError):
    code: int = ERR_WRITE
