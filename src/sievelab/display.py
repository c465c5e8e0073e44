# src/sievelab/display.py
from __future__ import annotations

from typing import TYPE_CHECKING

from colorama import Fore, Style

from sievelab import __version__
from sievelab.config import list_profiles_with_descriptions, read_current_profile
from sievelab.factors import factors_of, prime_factorization
from sievelab.families import FAMILIES, describe_families
from sievelab.fmt import format_factorization, format_percent, heading, label, pad_visible
from sievelab.runtime import CFG
from sievelab.table import COMPOSITE, FAMILY_ORDER, PRIME, UNIT, UNMARKED, NumberTable
from sievelab.utility import get_terminal_width

if TYPE_CHECKING:
    from sievelab.engine import Cursor, SieveEngine
    from sievelab.output_manager import OutputManager
    from sievelab.stats import Stats

ALIGN_WIDTH = 22  # label column

STATE_NAMES = {
    UNMARKED: "Unmarked",
    PRIME: "Prime",
    COMPOSITE: "Composite",
    UNIT: "Unit (neither prime nor composite)",
}


def _emit(om: OutputManager | None, line: str = "") -> None:
    if om is None:
        print(line)
    else:
        om.write(line)


# ---------- Grid --------------------------------------------------------------

def grid_columns(n: int, configured: int | None = None) -> int:
    """Configured column count, else 10 / 15 / 20 depending on N."""
    cols = int(configured if configured is not None else CFG("DISPLAY.COLUMNS", 0) or 0)
    if cols > 0:
        return cols
    if n <= 100:
        return 10
    if n <= 225:
        return 15
    return 20


def _cell_color(state: str, *, highlighted: bool, active: bool) -> str:
    if active:
        return f"{Fore.YELLOW}{Style.BRIGHT}"
    if state == PRIME:
        return f"{Fore.MAGENTA}{Style.BRIGHT}" if highlighted else Fore.GREEN
    if state == COMPOSITE:
        return Fore.RED
    if state == UNIT:
        return Fore.CYAN
    return Style.DIM


def render_grid(
    table: NumberTable,
    cursor: Cursor | None = None,
    *,
    family: str = "all",
    columns: int | None = None,
    show_cursor: bool = True,
) -> list[str]:
    """
    Colored grid lines. The current prime and multiple are highlighted while
    the sieve runs; with a family selected its members stand out.
    """
    n = len(table)
    cols = grid_columns(n, columns)
    width = len(str(n)) + 1
    active: set[int] = set()
    if show_cursor and cursor is not None and not cursor.complete:
        active.add(cursor.current_prime)
        if cursor.current_multiple:
            active.add(cursor.current_multiple)

    lines: list[str] = []
    row: list[str] = []
    for e in table:
        hl = family != "all" and family in e.families
        color = _cell_color(e.state, highlighted=hl, active=e.value in active)
        row.append(f"{color}{e.value:>{width}}{Style.RESET_ALL}")
        if len(row) == cols:
            lines.append("".join(row))
            row = []
    if row:
        lines.append("".join(row))
    return lines


def legend(family: str = "all") -> str:
    parts = [
        f"{Fore.GREEN}■ prime{Style.RESET_ALL}",
        f"{Fore.RED}■ composite{Style.RESET_ALL}",
        f"{Style.DIM}■ unmarked{Style.RESET_ALL}",
        f"{Fore.CYAN}■ unit{Style.RESET_ALL}",
        f"{Fore.YELLOW}{Style.BRIGHT}■ current{Style.RESET_ALL}",
    ]
    if family != "all":
        parts.append(f"{Fore.MAGENTA}{Style.BRIGHT}■ {FAMILIES[family].label.lower()}{Style.RESET_ALL}")
    return "  ".join(parts)


def status_line(engine: SieveEngine) -> str:
    c = engine.get_cursor()
    if c.complete:
        return f"{Fore.GREEN}{Style.BRIGHT}Complete{Style.RESET_ALL} after {engine.steps} steps."
    if c.current_multiple == 0:
        what = f"next: mark {c.current_prime} as prime"
    elif c.current_multiple <= engine.n:
        what = f"marking multiples of {c.current_prime}: {c.current_multiple}"
    else:
        what = f"done with {c.current_prime}, looking for the next prime"
    return f"Step {engine.steps}: {what}"


def print_grid(engine: SieveEngine, om: OutputManager | None = None, *, family: str | None = None) -> None:
    fam = family or CFG("DISPLAY.FAMILY", "all")
    for line in render_grid(
        engine.get_table(),
        engine.get_cursor(),
        family=fam,
        show_cursor=bool(CFG("DISPLAY.SHOW_CURSOR", True)),
    ):
        _emit(om, line)
    _emit(om)
    _emit(om, legend(fam))
    _emit(om, status_line(engine))


# ---------- Statistics --------------------------------------------------------

def print_statistics(stats: Stats, om: OutputManager | None = None) -> None:
    _emit(om, heading(f"Prime distribution up to {stats.n}"))
    _emit(om, label("Prime count π(n)", ALIGN_WIDTH) + f"{stats.prime_count} (estimated n/ln(n): {stats.estimated_count})")
    _emit(om, label("Prime density", ALIGN_WIDTH) + f"{format_percent(stats.density)} ({stats.prime_count} primes in {stats.n} numbers)")
    _emit(om, label("Prime gaps", ALIGN_WIDTH) + f"average {stats.avg_gap:.2f} (max: {stats.max_gap})")
    if not stats.complete:
        _emit(om, label("Progress", ALIGN_WIDTH) + f"settled up to {stats.highest_processed}")
    _emit(om)
    _emit(om, heading("Special prime families"))
    for tag in FAMILY_ORDER:
        fn = FAMILIES[tag]
        count = stats.family_counts.get(tag, 0)
        ref = f" (OEIS {fn.oeis})" if fn.oeis else ""
        _emit(om, label(fn.label + "s", ALIGN_WIDTH) + f"{count} found  {Style.DIM}{fn.description}{ref}{Style.RESET_ALL}")
    if not stats.complete:
        _emit(om, f"{Style.DIM}Families are identified once the sieve completes.{Style.RESET_ALL}")


def print_chart(stats: Stats, om: OutputManager | None = None, *, width: int | None = None) -> None:
    """
    Text rendition of the π(n) vs n/ln(n) comparison: one row per checkpoint,
    '█' for the actual count and '·' marking the estimate.
    """
    bar_w = int(width or CFG("DISPLAY.CHART_WIDTH", 40))
    bar_w = max(10, min(bar_w, get_terminal_width() - 30))
    top = max([p.estimated for p in stats.series] + [p.actual or 0 for p in stats.series] + [1])
    nw = len(str(stats.n))

    _emit(om, heading("Prime Number Theorem comparison"))
    _emit(om, f"{Style.DIM}{'n':>{nw}}  {'actual':>6}  {'n/ln(n)':>8}{Style.RESET_ALL}")
    for p in stats.series:
        est_col = min(bar_w - 1, int(round(p.estimated / top * (bar_w - 1))))
        if p.actual is None:
            cells = [" "] * bar_w
            actual = "?"
        else:
            filled = int(round(p.actual / top * (bar_w - 1)))
            cells = ["█" if i < filled else " " for i in range(bar_w)]
            actual = str(p.actual)
        cells[est_col] = f"{Fore.BLUE}·{Fore.GREEN}"
        bar = f"{Fore.GREEN}{''.join(cells)}{Style.RESET_ALL}"
        _emit(om, f"{p.n:>{nw}}  {pad_visible(actual, 6)}  {p.estimated:>8.2f}  {bar}")
    _emit(om, f"{Fore.GREEN}█ actual π(n){Style.RESET_ALL}  {Fore.BLUE}· estimated n/ln(n){Style.RESET_ALL}")


# ---------- Entry inspection --------------------------------------------------

def print_entry(engine: SieveEngine, value: int, om: OutputManager | None = None) -> None:
    """Details for one value: state, gap, factors and family memberships."""
    table = engine.get_table()
    e = table.entry(value)
    _emit(om, heading(str(value)) + f"  {STATE_NAMES.get(e.state, e.state)}")

    if e.state == PRIME and e.gap is not None:
        _emit(om, label("Gap", ALIGN_WIDTH) + str(e.gap))
    if e.state == COMPOSITE:
        _emit(om, label("Factors", ALIGN_WIDTH) + ", ".join(str(f) for f in factors_of(value)))
        _emit(om, label("Prime factorization", ALIGN_WIDTH) + format_factorization(prime_factorization(value)))
    if e.state == UNMARKED:
        _emit(om, f"{Style.DIM}Not reached by the sieve yet.{Style.RESET_ALL}")

    fams = describe_families(value, table)
    if fams:
        _emit(om, label("Special families", ALIGN_WIDTH))
        for name, detail in fams:
            _emit(om, f"  {Fore.MAGENTA}{name}{Style.RESET_ALL}: {detail}")


# ---------- Help / profiles ---------------------------------------------------

def show_intro_help(om: OutputManager | None = None) -> None:
    _emit(om, heading(f"Sieve of Eratosthenes v{__version__}"))
    _emit(om, "Mark 2 as prime, cross out its multiples, move to the next unmarked")
    _emit(om, "number and repeat. Whatever is never crossed out is prime.")
    _emit(om)
    cmds = [
        ("<N> | n <N>", "start over with bound N"),
        ("s | step [k]", "advance one (or k) steps"),
        ("r | run", "run to completion"),
        ("play", "animate until complete (Ctrl-C pauses)"),
        ("reset", "start over with the same bound"),
        ("g | grid", "show the grid"),
        ("stats", "prime count, density, gaps, families"),
        ("chart", "actual π(n) vs n/ln(n)"),
        ("i | inspect <k>", "details for value k"),
        ("f | family <name>", "highlight: all, " + ", ".join(FAMILY_ORDER)),
        ("speed <1..300>", "animation speed"),
        ("save", "write grid and statistics to the output file"),
        ("debug on|off", "toggle diagnostics"),
        ("p", "list profiles; type a profile name to switch"),
        ("h | q", "help | quit"),
    ]
    for cmd, desc in cmds:
        _emit(om, f"  {Fore.CYAN}{cmd:<20}{Style.RESET_ALL}{desc}")


def print_profiles_with_descriptions() -> None:
    active = read_current_profile()
    for name, desc in list_profiles_with_descriptions():
        mark = f"{Fore.GREEN}*{Style.RESET_ALL}" if name == active else " "
        print(f" {mark} {Style.BRIGHT}{name:<16}{Style.RESET_ALL}{desc}")
