"""Configuration paths and graph settings for TypeGraph."""

from __future__ import annotations

import os
from pathlib import Path

from .config_manager import load_config

BASE_DIR = Path(os.environ.get("TYPEGRAPH_HOME", str(Path.home() / ".typegraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Generated declarations live at <workspace>/.tactica/types.ts
TACTICA_DIR = ".tactica"
TACTICA_FILE = "types.ts"

# Fallback scan: <workspace>/src/**/*.ts
SOURCE_DIR = "src"
SOURCE_EXTENSIONS = {".ts"}

# [graph] settings from ~/.typegraph/config.toml (set via `tg config set`)
_graph_config = load_config(CONFIG_FILE)

ROOT_SUFFIX: str = _graph_config["root_suffix"]
LAYOUT: str = _graph_config["layout"]
NODE_SIZE: str = _graph_config["node_size"]
SHOW_PROPERTIES: bool = _graph_config["show_properties"]
AUTO_REFRESH: bool = _graph_config["auto_refresh"]
WATCH_DEBOUNCE: float = _graph_config["watch_debounce"]
