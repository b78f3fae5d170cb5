"""Lookup of debate formats by id."""

from .base import DebateFormat
from .oxford import OxfordFormat
from .lincoln_douglas import LincolnDouglasFormat
from .policy import PolicyFormat
from .socratic import SocraticFormat

DEFAULT_FORMAT = "oxford"

BUILT_IN_FORMATS: tuple[type[DebateFormat], ...] = (
    OxfordFormat,
    LincolnDouglasFormat,
    PolicyFormat,
    SocraticFormat,
)


def normalize_format_id(name: str) -> str:
    """Accept display-style ids such as ``Lincoln-Douglas``."""
    return name.strip().lower().replace("-", "_").replace(" ", "_")


class FormatRegistry:
    """Catalog of debate formats.

    Formats hold no per-session state, so one instance per format is shared
    by every session that selects it.
    """

    def __init__(self, format_classes: tuple[type[DebateFormat], ...] = BUILT_IN_FORMATS):
        self._formats: dict[str, DebateFormat] = {}
        for format_class in format_classes:
            self.register(format_class)

    def register(self, format_class: type[DebateFormat]) -> DebateFormat:
        debate_format = format_class()
        self._formats[debate_format.name] = debate_format
        return debate_format

    def get_format(self, name: str | None = None) -> DebateFormat:
        """Resolve a format id; None selects the default format."""
        format_id = normalize_format_id(name) if name else DEFAULT_FORMAT
        try:
            return self._formats[format_id]
        except KeyError:
            raise ValueError(
                f"Unknown format: {name}. Available: {', '.join(self._formats)}"
            ) from None

    def __contains__(self, name: str) -> bool:
        return normalize_format_id(name) in self._formats

    def list_formats(self) -> list[str]:
        return list(self._formats)

    def get_format_descriptions(self) -> dict[str, dict[str, str | int]]:
        """Display name, description and default round count per format."""
        return {
            format_id: {
                "display_name": debate_format.display_name,
                "description": debate_format.description,
                "default_rounds": debate_format.default_rounds,
            }
            for format_id, debate_format in self._formats.items()
        }


format_registry = FormatRegistry()
