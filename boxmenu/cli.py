#!/usr/bin/env python3
"""
boxmenu command line.

- `pick` turns tab-separated lines into a menu and prints the chosen payload,
  so it composes with shell pipelines: `choice=$(ls | boxmenu pick)`.
  `--index`, `--match` and `--list` do the same job without a terminal.
- `demo` shows every feature of the engine on a small panel-position menu.

Exit status: 0 on a choice/success, 1 when nothing was chosen or a direct
action failed, 2 for bad input or an unusable terminal, 130 on Ctrl+C.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Iterable, List, Optional, TextIO

from . import __version__
from .actions import ActionResult, run_direct
from .app import MenuApp
from .config import load_config
from .console import log_error, log_info, set_verbose, setup_file_logging
from .errors import BoxMenuError, PreconditionError
from .model import Item, MenuModel
from .render import Renderer

EXIT_OK = 0
EXIT_NO_CHOICE = 1
EXIT_PRECONDITION = 2
EXIT_INTERRUPTED = 130

PICK_PREVIEW_HEIGHT = 3


# ---------------------------------------------------------------------------
# Item sources

def parse_items(lines: Iterable[str]) -> List[Item]:
    """`label[\\tsecondary[\\tpayload]]` per line; payload defaults to the label."""
    items: List[Item] = []
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        fields = line.split("\t", 2)
        label = fields[0]
        secondary = fields[1] if len(fields) > 1 else ""
        payload = fields[2] if len(fields) > 2 else label
        items.append(Item(label=label, secondary=secondary, payload=payload))
    return items


def read_items(path: Optional[str], stdin: Optional[TextIO] = None) -> List[Item]:
    stdin = stdin or sys.stdin
    if path and path != "-":
        try:
            with open(Path(path).expanduser(), encoding="utf-8") as fh:
                items = parse_items(fh)
        except OSError as e:
            raise PreconditionError(f"Cannot read items from {path}: {e.strerror or e}") from None
    else:
        if stdin.isatty():
            raise PreconditionError("No items: pass FILE or pipe lines on standard input")
        items = parse_items(stdin)
    if not items:
        raise PreconditionError("No items to choose from")
    return items


def _emit_payload(payload: Any) -> ActionResult:
    return ActionResult.quit_session(output=str(payload))


# ---------------------------------------------------------------------------
# pick

def _direct_pick(args: argparse.Namespace, items: List[Item]) -> int:
    if args.list:
        for item in items:
            print(f"{item.secondary} :: {item.label}" if item.secondary else item.label)
        return EXIT_OK
    if args.index is not None:
        if not 0 <= args.index < len(items):
            log_error(f"Index {args.index} out of range (0..{len(items) - 1})")
            return EXIT_NO_CHOICE
        return run_direct(_emit_payload, items[args.index].payload)
    needle = args.match.lower()
    for item in items:
        if needle in item.label.lower():
            return run_direct(_emit_payload, item.payload)
    log_error(f"No item matches {args.match!r}")
    return EXIT_NO_CHOICE


def cmd_pick(args: argparse.Namespace) -> int:
    items = read_items(args.file)
    if args.list or args.index is not None or args.match is not None:
        return _direct_pick(args, items)

    preview_height = None
    if args.preview:
        items = [Item(it.label, it.secondary, it.payload, preview=str(it.payload)) for it in items]
        preview_height = PICK_PREVIEW_HEIGHT
    config = load_config(
        args.config,
        page_size=args.page_size,
        box_width=args.width,
        edge_policy="wrap" if args.wrap else None,
        preview_height=preview_height,
    )
    source = args.file if args.file and args.file != "-" else "stdin"
    app = MenuApp(
        MenuModel.from_config(items, config),
        Renderer(config, title=args.title, info_line=lambda model: f"Source: {source}"),
        _emit_payload,
        config,
    )
    result = app.run()
    if result is None or result.output is None:
        log_info("Nothing selected")
        return EXIT_NO_CHOICE
    print(result.output)
    return EXIT_OK


# ---------------------------------------------------------------------------
# demo

class PanelDemo:
    """Toy backend: a panel that sits on the left or the right."""

    def __init__(self, samples: int = 18):
        self.position = "right"
        self.samples = samples
        self.rescans = 0

    def items(self) -> List[Item]:
        rows = [
            Item("Left", "panel", ("set", "left"), icon="◀", color="cyan",
                 active=self.position == "left", preview="Dock the panel on the left edge."),
            Item("Right", "panel", ("set", "right"), icon="▶", color="green",
                 active=self.position == "right", preview="Dock the panel on the right edge."),
            Item("Toggle", "panel", ("toggle",), icon="⇄", color="yellow",
                 preview="Flip to the other side."),
            Item("Broken action", "demo", ("fail",), icon="✗", color="red",
                 preview="Reports a failure; the menu stays open."),
            Item("Crashing action", "demo", ("raise",), icon="!", color="red",
                 preview="Raises; the error lands on the status line."),
        ]
        rows += [
            Item(f"Sample window {i}", f"class-{i % 4}", ("noop", i), preview=f"Window #{i}\n{self.rescans} rescans")
            for i in range(1, self.samples + 1)
        ]
        rows.append(Item("Quit", "", ("quit",), icon="⏻", color="red", preview="Leave the demo."))
        return rows

    def refresh(self) -> List[Item]:
        self.rescans += 1
        return self.items()

    def apply(self, payload: Any) -> ActionResult:
        kind = payload[0]
        if kind == "set":
            if payload[1] == self.position:
                return ActionResult.info(f"Already on the {self.position}")
            self.position = payload[1]
            return ActionResult.success(f"Panel moved to the {self.position}")
        if kind == "toggle":
            return self.apply(("set", "left" if self.position == "right" else "right"))
        if kind == "fail":
            return ActionResult.failure("This action always fails")
        if kind == "raise":
            raise RuntimeError("demo action crashed")
        if kind == "quit":
            return ActionResult.quit_session("Bye", output=f"Final position: {self.position}")
        return ActionResult.warning(f"Nothing to do for item {payload[1]}")


def cmd_demo(args: argparse.Namespace) -> int:
    demo = PanelDemo()
    config = load_config(
        args.config,
        page_size=args.page_size,
        box_width=args.width,
        edge_policy="wrap" if args.wrap else None,
        title_rows=2,
        preview_height=2,
    )
    renderer = Renderer(
        config,
        title="Panel Position Demo",
        version=f"v{__version__}",
        header_lines=lambda model: [f"Current: {'◀ Left' if demo.position == 'left' else '▶ Right'}"],
        footer_lines=[" [↑/↓ j/k] Navigate  [Enter] Select  [l] Left  [r] Right  [t] Toggle  [R] Rescan  [q] Quit"],
        info_line=lambda model: f"Rescans: {demo.rescans}",
    )
    app = MenuApp(
        MenuModel.from_config(demo.items(), config),
        renderer,
        demo.apply,
        config,
        hotkeys={"l": ("set", "left"), "r": ("set", "right"), "t": ("toggle",)},
        refresh=demo.refresh,
        initial_status="Ready",
        rescan_after_action=True,
    )
    result = app.run()
    if result is not None and result.output:
        print(result.output)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Parser

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="boxmenu", description="Boxed terminal list menus.")
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("-c", "--config", help="TOML file with a [boxmenu] table.")
        sp.add_argument("-p", "--page-size", type=int, default=None, help="Visible list rows.")
        sp.add_argument("-w", "--width", type=int, default=None, help="Box width in columns.")
        sp.add_argument("--wrap", action="store_true", help="Wrap around at the ends of the list.")
        sp.add_argument("--log-file", help="Append diagnostics to this file.")
        sp.add_argument("--debug", action="store_true", help="Debug-level logging (with --log-file).")
        sp.add_argument("-v", "--verbose", action="store_true", help="Print informational messages.")

    sp = sub.add_parser("pick", help="Choose one line from FILE or standard input.")
    sp.add_argument("file", nargs="?", help="Item file (default: standard input).")
    sp.add_argument("-t", "--title", default="Select an item", help="Box title.")
    sp.add_argument("--preview", action="store_true", help="Show the payload of the selection.")
    direct = sp.add_mutually_exclusive_group()
    direct.add_argument("-i", "--index", type=int, help="Choose item N (0-based) without a UI.")
    direct.add_argument("-m", "--match", help="Choose the first item whose label contains TEXT.")
    direct.add_argument("-l", "--list", action="store_true", help="List the items and exit.")
    add_common(sp)
    sp.set_defaults(func=cmd_pick)

    sp = sub.add_parser("demo", help="Interactive demonstration menu.")
    add_common(sp)
    sp.set_defaults(func=cmd_demo)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)
    setup_file_logging(args.log_file, debug=args.debug)
    try:
        return int(args.func(args))
    except BoxMenuError as e:
        log_error(str(e))
        return EXIT_PRECONDITION
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
