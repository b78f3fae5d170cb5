"""Debate format definitions and implementations."""

from .base import DebateFormat, TurnSpec
from .oxford import OxfordFormat
from .lincoln_douglas import LincolnDouglasFormat
from .policy import PolicyFormat
from .socratic import SocraticFormat
from .registry import DEFAULT_FORMAT, format_registry

__all__ = [
    'DebateFormat',
    'TurnSpec',
    'OxfordFormat',
    'LincolnDouglasFormat',
    'PolicyFormat',
    'SocraticFormat',
    'DEFAULT_FORMAT',
    'format_registry'
]
