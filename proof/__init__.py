"""Structural-equality assertions for test suites."""

from __future__ import annotations

import logging

from proof.config import Config, ConfigError, default_config, load_config
from proof.equality import equal, get_len, is_nil, is_zero
from proof.handle import AbortTest, RecordingHandle, TestHandle, UnitTestHandle
from proof.prover import Outcome, PollPolicy, Prover, Strictness, new, recover
from proof.render import diff, render

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AbortTest",
    "Config",
    "ConfigError",
    "Outcome",
    "PollPolicy",
    "Prover",
    "RecordingHandle",
    "Strictness",
    "TestHandle",
    "UnitTestHandle",
    "default_config",
    "diff",
    "equal",
    "get_len",
    "is_nil",
    "is_zero",
    "load_config",
    "new",
    "recover",
    "render",
]
