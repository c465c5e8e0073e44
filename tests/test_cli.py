# tests/test_cli.py
"""
One-shot CLI runs (results routed to a file so assertions do not depend
on terminal colors) and scripted interactive sessions.
"""

from __future__ import annotations

from sievelab import config as CONFIG
from sievelab.cli import _resolve_inputs, main, repl
from sievelab.output_manager import OutputManager
from sievelab.runtime import current as _rt_current
from sievelab.workspace import ensure_workspace_seeded


def _run(tmp_path, *args: str) -> tuple[int, str]:
    out = tmp_path / "report.txt"
    rc = main([*args, "--no-animate", "--quiet", "--output", str(out)])
    text = out.read_text(encoding="utf-8") if out.exists() else ""
    return rc, text


def test_one_shot_report(tmp_path):
    rc, text = _run(tmp_path, "10")
    assert rc == 0
    assert "Complete after 15 steps." in text
    assert "4 (estimated n/ln(n): 4)" in text
    assert "40.00%" in text
    assert "average 1.67 (max: 2)" in text
    assert "Prime Number Theorem comparison" in text
    assert "\x1b[" not in text


def test_inspect_entries(tmp_path):
    rc, text = _run(tmp_path, "10", "--inspect", "9", "--inspect", "5")
    assert rc == 0
    assert "1, 3, 9" in text
    assert "3^2" in text
    assert "Twin prime: 5 and 7 are twin primes (differ by 2)." in text


def test_inspect_out_of_range(tmp_path):
    rc, _ = _run(tmp_path, "10", "--inspect", "11")
    assert rc == 2


def test_profile_and_bound(tmp_path):
    rc, text = _run(tmp_path, "legacy", "10")
    assert rc == 0
    assert "5 (estimated n/ln(n): 4)" in text


def test_bound_outside_profile_range(tmp_path):
    assert _run(tmp_path, "0")[0] == 2
    assert _run(tmp_path, "20000")[0] == 2
    assert _run(tmp_path, "legacy", "600")[0] == 2


def test_unknown_profile(tmp_path):
    assert _run(tmp_path, "nosuchprofile", "10")[0] == 2


def test_split_output_directory(tmp_path):
    target = tmp_path / "reports"
    rc = main(["30", "--no-animate", "--quiet", "--output", f"{target}/"])
    assert rc == 0
    assert (target / "sieve_30.txt").read_text(encoding="utf-8").startswith("  1  2  3")


def test_resolve_inputs():
    assert _resolve_inputs([]) == (None, None)
    assert _resolve_inputs(["100"]) == (None, "100")
    assert _resolve_inputs(["legacy"]) == ("legacy", None)
    assert _resolve_inputs(["legacy", "50"]) == ("legacy", "50")
    assert _resolve_inputs(["50", "legacy"]) == (None, "50")


def test_inspect_out_of_range_writes_nothing(tmp_path):
    target = tmp_path / "reports"
    rc = main(["10", "--no-animate", "--quiet", "--output", f"{target}/", "--inspect", "5", "--inspect", "11"])
    assert rc == 2
    assert not (target / "sieve_10.txt").exists()


def test_statistics_show_oeis_references(tmp_path):
    rc, text = _run(tmp_path, "10")
    assert rc == 0
    for ref in ("A001097", "A000668", "A019434", "A005384"):
        assert f"(OEIS {ref})" in text


# ---------- interactive session -----------------------------------------------


def _repl(monkeypatch, *commands: str, make_output_manager=None) -> tuple[int, list[str]]:
    """Feed commands to repl(); returns (rc, prompts shown before each command)."""
    prompts: list[str] = []
    feed = iter(commands)

    def fake_input(prompt=""):
        prompts.append(prompt)
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)
    ensure_workspace_seeded()
    rc = repl(
        "default",
        speed=100,
        family="all",
        make_output_manager=make_output_manager or (lambda n: OutputManager(bound=n)),
    )
    return rc, prompts


def test_repl_quit(monkeypatch):
    rc, prompts = _repl(monkeypatch, "q", "step")
    assert rc == 0
    assert len(prompts) == 1
    assert "N=100, step 0 " in prompts[0]


def test_repl_end_of_input_exits(monkeypatch):
    rc, prompts = _repl(monkeypatch)
    assert rc == 0
    assert len(prompts) == 1


def test_repl_step_and_enter(monkeypatch):
    _, prompts = _repl(monkeypatch, "step 3", "", "s", "q")
    assert "N=100, step 3 " in prompts[1]
    assert "N=100, step 4 " in prompts[2]
    assert "N=100, step 5 " in prompts[3]


def test_repl_step_rejects_bad_count(monkeypatch, capsys):
    _, prompts = _repl(monkeypatch, "step 0", "q")
    assert "step 0 " in prompts[1]
    assert "Invalid input" in capsys.readouterr().err


def test_repl_new_bound_and_reset(monkeypatch):
    _, prompts = _repl(monkeypatch, "n 20", "step 2", "reset", "30", "q")
    assert "N=20, step 0 " in prompts[1]
    assert "N=20, step 2 " in prompts[2]
    assert "N=20, step 0 " in prompts[3]
    assert "N=30, step 0 " in prompts[4]


def test_repl_rejects_invalid_bound(monkeypatch, capsys):
    _, prompts = _repl(monkeypatch, "n 0", "20000", "q")
    assert "N=100" in prompts[1]
    assert "N=100" in prompts[2]
    err = capsys.readouterr().err
    assert err.count("Invalid input") == 2


def test_repl_run_completes(monkeypatch):
    _, prompts = _repl(monkeypatch, "n 10", "run", "step", "q")
    assert "N=10, step 15 (complete)" in prompts[2]
    assert "N=10, step 15 (complete)" in prompts[3]


def test_repl_inspect(monkeypatch, capsys):
    _repl(monkeypatch, "n 10", "run", "inspect 5", "i 9", "inspect 11", "q")
    captured = capsys.readouterr()
    assert "5 and 7 are twin primes (differ by 2)." in captured.out
    assert "5 = 2^(2^1) + 1, one of the 5 known Fermat primes." in captured.out
    assert "1, 3, 9" in captured.out
    assert "NameError" not in captured.err
    assert captured.err.count("Invalid input") == 1


def test_repl_switches_profile(monkeypatch, capsys):
    _, prompts = _repl(monkeypatch, "legacy", "n 10", "run", "stats", "q")
    assert prompts[1].startswith("\nProfile: legacy ")
    assert CONFIG.read_current_profile() == "legacy"
    out = capsys.readouterr().out
    assert "Applied profile: legacy" in out
    assert "5 (estimated n/ln(n): 4)" in out


def test_repl_profile_bounds_apply_after_switch(monkeypatch, capsys):
    # legacy allows 10..500 only
    _, prompts = _repl(monkeypatch, "legacy", "n 600", "q")
    assert "N=100" in prompts[2]
    assert "Invalid input" in capsys.readouterr().err


def test_repl_family_speed_and_debug(monkeypatch, capsys):
    _repl(monkeypatch, "family twin", "family nope", "speed 500", "speed 50", "debug on", "q")
    out = capsys.readouterr().out
    assert "Usage: FAMILY" in out
    assert "Usage: SPEED [1..300] (currently 100)" in out
    assert "Debug mode enabled for this session." in out
    assert _rt_current().debug is True


def test_repl_unknown_command(monkeypatch, capsys):
    _repl(monkeypatch, "frobnicate", "q")
    assert "'frobnicate'. Type H for help." in capsys.readouterr().out


def test_repl_save(monkeypatch, tmp_path):
    target = tmp_path / "session.txt"

    def make_om(n):
        return OutputManager(output_file=str(target), quiet=True, bound=n)

    _repl(monkeypatch, "n 10", "run", "save", "q", make_output_manager=make_om)
    text = target.read_text(encoding="utf-8")
    assert "Complete after 15 steps." in text
    assert "\x1b[" not in text
