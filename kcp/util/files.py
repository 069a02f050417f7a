"""
File utility functions.
"""

import json
import os
from pathlib import Path
from typing import Any

EXECUTABLE_MODE = 0o755


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_text(path: str | Path) -> str:
    """Read text file content."""
    return Path(path).read_text()


def write_text(path: str | Path, content: str, mode: int | None = None) -> Path:
    """Write text to file, creating parent directories if needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content)
    if mode is not None:
        p.chmod(mode)
    return p


def read_json(path: str | Path) -> Any:
    """Read and decode a JSON file."""
    with open(path) as f:
        return json.load(f)


def write_json(path: str | Path, data: Any) -> Path:
    """Write data as indented JSON."""
    return write_text(path, json.dumps(data, indent=2) + "\n")


def is_writable_dir(path: str | Path) -> bool:
    """Check whether files can be created in a directory."""
    p = Path(path)
    return p.is_dir() and os.access(p, os.W_OK | os.X_OK)
