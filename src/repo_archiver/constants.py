"""Centralized event types, timing and query limits."""

from __future__ import annotations

# -- Archive event types --

EVENT_STARTED = "started"
EVENT_COMPLETED = "completed"
EVENT_FAILED = "failed"

EVENT_TYPES: frozenset[str] = frozenset({
	EVENT_STARTED,
	EVENT_COMPLETED,
	EVENT_FAILED,
})

# -- Timing (seconds) --

DRY_RUN_DELAY = 0.3
INTER_ITEM_DELAY = 0.1
INPUT_POLL_TIMEOUT = 0.05
SPINNER_INTERVAL = 0.08
# How long a trailing ESC waits for the rest of an escape sequence.
ESCAPE_TIMEOUT = 0.025

SPINNER_FRAMES: tuple[str, ...] = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

# -- gh CLI --

GH_BINARY = "gh"
DEFAULT_REPO_LIMIT = 200
REPO_JSON_FIELDS = "name,createdAt,description,pushedAt"

DESCRIPTION_WIDTH = 50

# -- Key names produced by keys.decode_keys --

KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_ENTER = "enter"
KEY_TAB = "tab"
KEY_ESC = "esc"
KEY_SPACE = "space"
KEY_CTRL_C = "ctrl-c"
