# output_manager.py

import os

from sievelab.fmt import strip_ansi
from sievelab.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(str(workspace_root), path))


def validate_output_setting(output_file: str | None) -> str | None:
    """
    None / "" → None (use profile OUTPUT.OUTPUT_FILE).
    Rejects names with characters most filesystems refuse.
    """
    if output_file is None:
        return None
    s = str(output_file).strip()
    if not s:
        return None
    bad = set('<>|"?*') & set(s)
    if bad:
        raise ValueError(f"invalid character(s) {''.join(sorted(bad))!r} in output path {s!r}")
    return s


class OutputManager:
    """
    Handles all printing/output, including to screen and/or file.

    Usage:
        # Split mode (one report file per bound):
        om = OutputManager(output_file="results/", bound=100)
        om.write("Hello")   # prints and buffers; file written on close()
        om.close()

        # Single file (append all runs to one file):
        om = OutputManager(output_file="results/all.txt")
        om.write("Hello")
        om.close()
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False, bound: int | None = None):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                "." or "./"      => per-bound files (sieve_<N>.txt) in the workspace
                endswith "/"     => per-bound files in specified dir
                path/to/file.txt => append all runs to this file
            quiet: if True, no output to screen (only to file)
            bound: sieve bound, used for filename in per-bound mode
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self.bound = bound
        self._buffer: list[str] = []
        self._closed = False

        self._mode: str = "none"     # "none" | "split" | "single"
        self._path: str | None = None

        if self.output_file in (".", "./") or self.output_file.endswith("/"):
            if bound is None:
                raise ValueError("A bound must be provided when outputting to a directory.")
            directory = resolve_output_path(self.output_file, workspace_dir())
            os.makedirs(directory, exist_ok=True)
            self._mode = "split"
            self._path = os.path.join(directory, f"sieve_{bound}.txt")

        elif self.output_file:
            path = resolve_output_path(self.output_file, workspace_dir())
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._mode = "single"
            self._path = path

    @property
    def path(self) -> str | None:
        return self._path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        # Split mode writes once on close() so the file is not truncated per call
        if self._mode == "single" and self._path:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(strip_ansi(text))

    def close(self) -> None:
        """Flush buffered output (split mode) or add a separator (single mode)."""
        if self._closed:
            return
        self._closed = True
        if not self._buffer or not self._path:
            return
        if self._mode == "split":
            with open(self._path, "w", encoding="utf-8") as fh:
                fh.write(strip_ansi("".join(self._buffer)))
        elif self._mode == "single":
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write("\n")  # one empty line between runs

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
