"""
Color Mode
Decided once at startup and passed to the report renderer
"""

import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional, TextIO


@dataclass(frozen=True)
class ColorMode:
    enabled: bool = False

    @classmethod
    def detect(cls, force_plain: bool = False, stream: Optional[TextIO] = None,
               environ: Optional[Mapping[str, str]] = None) -> "ColorMode":
        """Colors only on an interactive, capable terminal

        Disabled by --no-color/--plain, a non-empty NO_COLOR, TERM=dumb,
        or a stream that is not a tty.
        """
        if environ is None:
            environ = os.environ
        if stream is None:
            stream = sys.stdout

        if force_plain:
            return cls(False)
        if environ.get("NO_COLOR"):
            return cls(False)
        if environ.get("TERM") == "dumb":
            return cls(False)

        isatty = getattr(stream, "isatty", None)
        try:
            interactive = bool(isatty and isatty())
        except ValueError:
            # closed stream
            interactive = False

        return cls(interactive)

    @property
    def color_system(self) -> Optional[str]:
        """Value for rich.console.Console(color_system=...)"""
        return "standard" if self.enabled else None
