"""Package version, kept in the top-level VERSION file."""
import pathlib

_VERSION_FILE = pathlib.Path(__file__).resolve().parent.parent / "VERSION"


def _read_version(default: str = "1.0.0") -> str:
    try:
        return _VERSION_FILE.read_text(encoding="utf-8").strip() or default
    except OSError:
        return default


__version__ = _read_version()

VERSION = tuple(int(part) for part in __version__.split("."))
