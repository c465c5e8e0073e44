# src/sievelab/cli.py

"""
Sieve of Eratosthenes - stepwise terminal visualizer

Description:
    Runs the Sieve of Eratosthenes over 1..N one action at a time, shows the
    number grid as it is marked, and reports prime count, density, gaps,
    special prime families and a comparison with the Prime Number Theorem.

usage: see sievelab -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import sys
import textwrap
import time
import traceback
from importlib.resources import files as pkg_files

from colorama import Fore, Style
from colorama import init as colorama_init

from sievelab import __version__ as _ver
from sievelab import config as CONFIG
from sievelab.config import FAMILY_CHOICES
from sievelab.display import (
    print_chart,
    print_entry,
    print_grid,
    print_profiles_with_descriptions,
    print_statistics,
    show_intro_help,
    status_line,
)
from sievelab.engine import SieveEngine
from sievelab.fmt import format_duration
from sievelab.output_manager import OutputManager, validate_output_setting
from sievelab.progress import Progress
from sievelab.runtime import APPLY, CFG, debug_line, ensure_runtime_deps
from sievelab.runtime import current as _rt_current
from sievelab.stats import highest_processed
from sievelab.utility import (
    UserInputError,
    clear_screen,
    flatten_dotted,
    parse_bound,
    parse_int,
    speed_to_delay,
    typename,
)
from sievelab.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if msg.startswith("Invalid input:"):
        msg = msg.replace("Invalid input:", f"{Fore.RED}Invalid input:{Style.RESET_ALL}", 1)
    elif not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _resolve_inputs(items: list[str]) -> tuple[str | None, str | None]:
    """Return (profile_or_command, bound_text) from the first two positionals.

    Rules:
      - one item: integer-looking -> bound, else profile/command
      - two items: first is profile/command, second is the bound
    """
    if not items:
        return None, None
    if len(items) == 1:
        return (None, items[0]) if parse_int(items[0]) is not None else (items[0], None)
    a, b = items[0], items[1]
    if parse_int(a) is not None:
        return None, a
    return a, b


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace and copy the packaged profiles if missing.

      init --overwrite
          Meant for developers. Requires environment variable SIEVELAB_DEV=1.
          Replaces all workspace profiles with the packaged ones.

      profiles
          List available profiles.

      where
          Show the workspace and package paths.

    Without N an interactive session starts; type H there for help.
    """)

    p = argparse.ArgumentParser(
        prog="sievelab",
        description="Sieve of Eratosthenes — stepwise visualizer and prime statistics",
        usage=(
            "sievelab [[profile] [N]] [--speed S] [--family F] [--no-animate]\n"
            "                [--inspect K] [--output OUTPUT] [--quiet] [--debug]\n"
            "       sievelab -h | --help\n"
            "       sievelab init [--overwrite]\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[[profile] N]",
                   help="optional profile name followed by the sieve bound N")
    p.add_argument("--speed", type=int, default=None, help="Animation speed 1..300 (profile SIEVE.SPEED)")
    p.add_argument("--family", choices=FAMILY_CHOICES, default=None,
                   help="Highlight a prime family in the grid (profile DISPLAY.FAMILY)")
    p.add_argument("--no-animate", action="store_true", help="Skip the animation and show the final result")
    p.add_argument("--inspect", type=int, action="append", default=[], metavar="K",
                   help="Show details for value K (repeatable)")
    p.add_argument("--output", default=None, help="Write results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output")
    p.add_argument("--overwrite", action="store_true", help="With init: replace workspace profiles")
    p.add_argument("--debug", action="store_true", help="Show internal trace info and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in (sys.argv if argv is None else argv):
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


# ---- driving loops (the engine itself never sleeps or prints) ----

def animate(engine: SieveEngine, *, speed: int, family: str) -> bool:
    """
    Step the engine on a timer, redrawing the grid after each step.
    Ctrl-C pauses; returns True when the sieve completed.
    """
    delay = speed_to_delay(speed)
    debug_line(f"animate: N={engine.n}, speed={speed}, delay={delay:.3f}s")
    try:
        while engine.step():
            clear_screen(keep_scrollback=True)
            print_grid(engine, om=None, family=family)
            if delay:
                time.sleep(delay)
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Paused.{Style.RESET_ALL} {status_line(engine)}")
        return False
    return True


def run_with_progress(engine: SieveEngine, *, quiet: bool) -> None:
    """Run to completion, with a progress bar for large bounds."""
    bar = Progress(engine.n, enabled=not quiet and sys.stdout.isatty() and engine.n >= 2000)
    while engine.step():
        c = engine.get_cursor()
        bar.update(highest_processed(engine.n, c), label=f"p = {c.current_prime}")
    bar.done()
    debug_line(f"run: {engine.steps} steps in {format_duration(bar.elapsed())}")


def report(engine: SieveEngine, om: OutputManager, *, family: str, inspect: list[int] = ()) -> None:
    bad = [k for k in inspect if not 1 <= k <= engine.n]
    if bad:
        raise UserInputError(f"Invalid input: {bad[0]} is outside 1..{engine.n}.")
    print_grid(engine, om, family=family)
    om.write()
    stats = engine.summarize()
    print_statistics(stats, om)
    om.write()
    print_chart(stats, om)
    for k in inspect:
        om.write()
        print_entry(engine, k, om)


def _bounds() -> tuple[int, int]:
    return int(CFG("SIEVE.MIN_BOUND", 1)), int(CFG("SIEVE.MAX_BOUND", 10_000))


def _load_profile(name: str, *, debug: bool) -> str:
    """Load and apply a profile; falls back to built-in defaults when missing."""
    if not CONFIG.has_profile(name):
        if name != "default":
            print(f"Unknown profile: '{name}'")
            print("Available profiles:", ", ".join(CONFIG.list_all_profiles()))
            raise UserInputError(f"unknown profile '{name}'.")
        APPLY(CONFIG.default_settings())
        return "builtin"

    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if debug:
        _rt_current().debug = True
        print(f"[debug] active profile: {selected.name}", file=sys.stderr)
        print(f"[debug] profile file: {selected._source}", file=sys.stderr)
        for k, v in sorted(flatten_dotted(selected.as_dict()).items(), key=lambda kv: kv[0].lower()):
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    return selected.name


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init()

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    if not ensure_runtime_deps(strict=True):
        return 1

    profile, bound_text = _resolve_inputs(args.items)

    if args.overwrite and profile != "init":
        parser.error("--overwrite can only be used together with init")

    if profile == "init":
        if args.overwrite:
            if os.environ.get("SIEVELAB_DEV") != "1":
                print("Refusing to overwrite: set SIEVELAB_DEV=1 to enable developer overwrite.")
                return 2
            ws, copied = seed_workspace(overwrite=True)
            print(f"Workspace ready at: {ws} (overwrote existing files)")
        else:
            ws, _, copied = ensure_workspace_seeded()
            print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}")
        return 0

    ensure_workspace_seeded()

    if profile == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('sievelab')}")
        return 0
    if profile == "profiles":
        print_profiles_with_descriptions()
        return 0
    if profile == "active":
        print(f"Active profile: {CONFIG.read_current_profile() or 'default'}")
        return 0

    # Choose profile: explicit → last-used → default
    if profile:
        profile_name = profile
    else:
        last = CONFIG.read_current_profile()
        profile_name = last if last and CONFIG.has_profile(last) else "default"
    profile_name = _load_profile(profile_name, debug=args.debug)
    if args.debug:
        rt.debug = True

    speed = args.speed if args.speed is not None else int(CFG("SIEVE.SPEED", 100))
    if not 1 <= speed <= 300:
        raise UserInputError(f"Invalid input: speed must be within 1..300, got {speed}.")
    family = args.family or CFG("DISPLAY.FAMILY", "all")

    try:
        cli_target = validate_output_setting(args.output)
    except ValueError as e:
        print(f"Fatal error in --output: {e}", file=sys.stderr)
        return 1

    def make_output_manager(n: int) -> OutputManager:
        target = cli_target if cli_target is not None else (CFG("OUTPUT.OUTPUT_FILE", "") or None)
        return OutputManager(output_file=target, quiet=args.quiet, bound=n)

    # --- one-shot path ---
    if bound_text is not None:
        lo, hi = _bounds()
        n = parse_bound(bound_text, lo=lo, hi=hi)
        engine = SieveEngine(n)
        with make_output_manager(n) as om:
            if not args.no_animate and not args.quiet and sys.stdout.isatty():
                if not animate(engine, speed=speed, family=family):
                    return 130
                clear_screen(keep_scrollback=True)
            else:
                run_with_progress(engine, quiet=args.quiet)
            report(engine, om, family=family, inspect=args.inspect)
        return 0

    return repl(profile_name, speed=speed, family=family, make_output_manager=make_output_manager)


# ---- REPL ----
def repl(profile_name: str, *, speed: int, family: str, make_output_manager) -> int:
    lo, hi = _bounds()
    engine = SieveEngine(int(CFG("SIEVE.DEFAULT_BOUND", 100)))

    if not _rt_current().debug:
        clear_screen()
    print(f"{Fore.YELLOW}{Style.BRIGHT}Sieve of Eratosthenes v{_ver}{Style.RESET_ALL}")

    current_profile = profile_name
    while True:
        try:
            prompt = (f"\nProfile: {current_profile} — N={engine.n}, step {engine.steps}"
                      f"{' (complete)' if engine.complete else ''} (h=Help, q=Quit): ")
            user_input = input(prompt).strip()
            low = user_input.lower()
            parts = low.split()
            cmd, rest = (parts[0], parts[1:]) if parts else ("", [])

            if low in {"q", "quit", "exit"}:
                break
            if low in {"", "s", "step"} or (cmd in {"s", "step"} and rest):
                k = parse_int(rest[0]) if rest else 1
                if k is None or k < 1:
                    raise UserInputError("Invalid input: usage STEP [k], k >= 1.")
                for _ in range(k):
                    if not engine.step():
                        break
                print_grid(engine, family=family)
                continue
            if low in {"h", "help"}:
                show_intro_help()
                continue
            if low in {"p", "profiles"}:
                print_profiles_with_descriptions()
                continue
            if low in {"r", "run"}:
                run_with_progress(engine, quiet=False)
                print_grid(engine, family=family)
                continue
            if low == "play":
                animate(engine, speed=speed, family=family)
                continue
            if low == "reset":
                engine.reset()
                print_grid(engine, family=family)
                continue
            if low in {"g", "grid"}:
                print_grid(engine, family=family)
                continue
            if low == "stats":
                print_statistics(engine.summarize())
                continue
            if low == "chart":
                print_chart(engine.summarize())
                continue
            if low == "save":
                with make_output_manager(engine.n) as om:
                    report(engine, om, family=family)
                    if om.path:
                        print(f"Saved to {om.path}")
                continue
            if cmd in {"i", "inspect"} and len(rest) == 1:
                k = parse_int(rest[0])
                if k is None or not 1 <= k <= engine.n:
                    raise UserInputError(f"Invalid input: value must be within 1..{engine.n}.")
                print_entry(engine, k)
                continue
            if cmd in {"f", "family"}:
                if len(rest) != 1 or rest[0] not in FAMILY_CHOICES:
                    print(f"Usage: FAMILY [{'|'.join(FAMILY_CHOICES)}]")
                else:
                    family = rest[0]
                    print_grid(engine, family=family)
                continue
            if cmd == "speed":
                k = parse_int(rest[0]) if len(rest) == 1 else None
                if k is None or not 1 <= k <= 300:
                    print(f"Usage: SPEED [1..300] (currently {speed})")
                else:
                    speed = k
                continue
            if cmd == "debug":
                rt = _rt_current()
                if not rest or rest[0] == "status":
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                elif rest[0] in {"on", "off"}:
                    rt.debug = rest[0] == "on"
                    print(f"Debug mode {'enabled' if rt.debug else 'disabled'} for this session.")
                else:
                    print("Usage: DEBUG [on|off|status]")
                continue

            # new bound?
            bound_text = rest[0] if cmd == "n" and len(rest) == 1 else user_input
            if parse_int(bound_text) is not None:
                engine.reset(parse_bound(bound_text, lo=lo, hi=hi))
                print_grid(engine, family=family)
                continue

            # treat as profile switch
            if CONFIG.has_profile(user_input):
                selected = CONFIG.load_settings(user_input)
                APPLY(selected)
                CONFIG.write_current_profile(user_input)
                current_profile = selected.name
                lo, hi = _bounds()
                speed = int(CFG("SIEVE.SPEED", speed))
                family = CFG("DISPLAY.FAMILY", family)
                engine = SieveEngine(engine.n if lo <= engine.n <= hi else int(CFG("SIEVE.DEFAULT_BOUND", 100)))
                print(f"Applied profile: {current_profile}")
                continue

            print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
        except UserInputError as e:
            _print_user_error(str(e))
        except (EOFError, KeyboardInterrupt):
            print()
            break
        except Exception as e:
            if _rt_current().debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
