# lottoprophet/errors.py
from __future__ import annotations


class LottoProphetError(Exception):
    """Base class for every error raised by lottoprophet."""


class RegistryError(LottoProphetError):
    """A static attribute table does not cover 1..49 exactly once."""


class MalformedDrawError(LottoProphetError, ValueError):
    """A draw could not be parsed into seven numbers."""


class ConfigError(LottoProphetError, ValueError):
    """A configuration value is out of range or of the wrong type."""
