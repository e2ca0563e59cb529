from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

try:
    import tomllib  # Py3.11+
except ModuleNotFoundError:  # pragma: no cover - depends on interpreter
    import tomli as tomllib  # Py<=3.10

from .errors import PreconditionError

EDGE_POLICIES = ("clamp", "wrap")
REDRAW_POLICIES = ("on_change", "always")

# rows above the first list row besides the title rows: top border + separator
_FRAME_ROWS_ABOVE_LIST = 2

_ENV_KEYS = {
    "BOXMENU_PAGE_SIZE": "page_size",
    "BOXMENU_BOX_WIDTH": "box_width",
    "BOXMENU_EDGE_POLICY": "edge_policy",
    "BOXMENU_REDRAW": "redraw",
    "BOXMENU_ESCAPE_TIMEOUT": "escape_timeout",
}


@dataclass(frozen=True)
class MenuConfig:
    """Layout and behaviour shared by the renderer and the input mapping."""

    box_width: int = 100
    page_size: int = 10
    title_rows: int = 1
    preview_height: int = 0
    edge_policy: str = "clamp"
    redraw: str = "on_change"
    escape_timeout: float = 0.05
    mouse: bool = True
    alt_screen: bool = True
    clear_status_on_input: bool = False
    border_color: str = "magenta"
    accent_color: str = "cyan"

    @property
    def inner_width(self) -> int:
        return self.box_width - 2

    @property
    def header_offset(self) -> int:
        """1-based terminal row of the first list row."""
        return _FRAME_ROWS_ABOVE_LIST + self.title_rows + 1

    def validate(self) -> "MenuConfig":
        if self.page_size < 1:
            raise PreconditionError(f"page_size must be >= 1 (got {self.page_size})")
        if self.box_width < 20:
            raise PreconditionError(f"box_width must be >= 20 (got {self.box_width})")
        if self.title_rows < 1:
            raise PreconditionError(f"title_rows must be >= 1 (got {self.title_rows})")
        if self.preview_height < 0:
            raise PreconditionError(f"preview_height must be >= 0 (got {self.preview_height})")
        if self.edge_policy not in EDGE_POLICIES:
            raise PreconditionError(f"edge_policy must be one of {EDGE_POLICIES} (got {self.edge_policy!r})")
        if self.redraw not in REDRAW_POLICIES:
            raise PreconditionError(f"redraw must be one of {REDRAW_POLICIES} (got {self.redraw!r})")
        if not 0 < self.escape_timeout <= 1:
            raise PreconditionError(f"escape_timeout must be in (0, 1] seconds (got {self.escape_timeout})")
        return self


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw TOML/env value to the type of MenuConfig.<name>."""
    default = getattr(MenuConfig, name)
    try:
        if isinstance(default, bool):
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (TypeError, ValueError):
        raise PreconditionError(f"Invalid value for {name}: {value!r}") from None
    return str(value).strip()


def read_config_file(path: Path) -> dict:
    """Read the `[boxmenu]` table (or the top level) of a TOML file."""
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        raise PreconditionError(f"Config file not found: {path}") from None
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise PreconditionError(f"Unreadable config file {path}: {e}") from None
    section = data.get("boxmenu", data)
    known = {f.name for f in fields(MenuConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise PreconditionError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return dict(section)


def load_config(
    path: Optional[os.PathLike | str] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> MenuConfig:
    """Build a MenuConfig from defaults < TOML file < environment < overrides.

    `None` overrides are ignored so argparse defaults can be passed through.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if path:
        for name, raw in read_config_file(Path(path).expanduser()).items():
            values[name] = _coerce(name, raw)

    for key, name in _ENV_KEYS.items():
        raw = env.get(key, "").strip()
        if raw:
            values[name] = _coerce(name, raw)

    for name, raw in overrides.items():
        if raw is not None:
            values[name] = _coerce(name, raw)

    return replace(MenuConfig(), **values).validate()
