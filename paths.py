# -*- coding: utf-8 -*-
########################
# paths.py
########################
# Purpose:
# - Central filesystem path helpers.
# - Defines where the song library lives when config.py does not override it.
#
# Design notes:
# - Launched as a .py file: the library sits beside that file (<root>/Songs).
# - Launched through the installed gridbeat console script, -m or -c: the working directory is the root.
# - Return pathlib.Path only. Nothing is created here.
#
########################
# Interfaces:
# Public functions:
# - app_root_dir() -> pathlib.Path
# - default_songs_dir() -> pathlib.Path
# - sync_file_path(songs_dir: pathlib.Path) -> pathlib.Path
#
# Outputs:
# - Paths used by config.py and gridbeat_cli.py.
#
########################

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional


def _launched_script() -> Optional[Path]:
    main_file = getattr(sys.modules.get("__main__"), "__file__", None)
    if not main_file:
        return None
    script_path = Path(str(main_file)).resolve()
    # Console-script shims carry no .py suffix and live in the environment's bin directory.
    if script_path.suffix.lower() != ".py":
        return None
    return script_path


def app_root_dir() -> Path:
    script_path = _launched_script()
    if script_path is not None:
        return script_path.parent
    return Path.cwd().resolve()


def default_songs_dir() -> Path:
    """Return the default song library root (one sub-directory per song)."""
    return app_root_dir() / "Songs"


def sync_file_path(songs_dir: Path) -> Path:
    """The title:offset calibration list sits at the top of the song library."""
    return Path(songs_dir) / "sync.txt"
