"""Non-blocking keyboard input for the terminal UI."""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import termios
import time
import tty
from collections import deque
from typing import Any, TextIO

from repo_archiver.constants import (
	ESCAPE_TIMEOUT,
	KEY_CTRL_C,
	KEY_DOWN,
	KEY_ENTER,
	KEY_ESC,
	KEY_LEFT,
	KEY_RIGHT,
	KEY_SPACE,
	KEY_TAB,
	KEY_UP,
)

logger = logging.getLogger(__name__)


class TerminalError(RuntimeError):
	"""Raised when stdin is not an interactive terminal."""


_ESCAPE_SEQUENCES: dict[str, str] = {
	"\x1b[A": KEY_UP,
	"\x1b[B": KEY_DOWN,
	"\x1b[C": KEY_RIGHT,
	"\x1b[D": KEY_LEFT,
	"\x1bOA": KEY_UP,
	"\x1bOB": KEY_DOWN,
	"\x1bOC": KEY_RIGHT,
	"\x1bOD": KEY_LEFT,
	"\x1b[Z": KEY_TAB,
}

_SINGLE_KEYS: dict[str, str] = {
	"\r": KEY_ENTER,
	"\n": KEY_ENTER,
	"\t": KEY_TAB,
	" ": KEY_SPACE,
	"\x03": KEY_CTRL_C,
}


def incomplete_escape_start(text: str) -> int:
	"""Index where a trailing, unfinished escape sequence begins.

	Returns `len(text)` when the text ends on a complete key.
	"""
	start = text.rfind("\x1b")
	if start == -1:
		return len(text)
	tail = text[start + 1:]
	if tail in ("", "O"):
		return start
	if tail.startswith("[") and not any("@" <= ch <= "~" for ch in tail[1:]):
		return start
	return len(text)


def decode_keys(data: str) -> list[str]:
	"""Split raw terminal input into key names.

	Arrow keys, enter, tab, space, escape and ctrl-c map to the KEY_* names;
	printable characters are returned as themselves; other escape sequences
	and control characters are dropped.
	"""
	keys: list[str] = []
	i = 0
	while i < len(data):
		ch = data[i]
		if ch == "\x1b":
			seq = data[i:i + 3]
			if seq in _ESCAPE_SEQUENCES:
				keys.append(_ESCAPE_SEQUENCES[seq])
				i += 3
				continue
			if data[i + 1:i + 2] in ("[", "O"):
				# Unknown CSI/SS3 sequence: skip to its final byte.
				j = i + 2
				while j < len(data) and not ("@" <= data[j] <= "~"):
					j += 1
				i = j + 1
				continue
			keys.append(KEY_ESC)
			i += 1
			continue
		if ch in _SINGLE_KEYS:
			keys.append(_SINGLE_KEYS[ch])
		elif ch.isprintable():
			keys.append(ch)
		i += 1
	return keys


class KeyReader:
	"""Reads stdin in cbreak mode and hands out decoded keys one at a time.

	Use as a context manager; the terminal mode is restored on exit. An escape
	sequence split across reads is held back until the rest arrives, and a
	lone ESC is only reported once ESCAPE_TIMEOUT passes with no more input.
	"""

	def __init__(self, stream: TextIO | None = None) -> None:
		self._stream = stream or sys.stdin
		self._fd = self._stream.fileno()
		self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
		self._pending: deque[str] = deque()
		self._carry = ""
		self._saved: list[Any] | None = None
		self._eof = False

	def __enter__(self) -> KeyReader:
		if not os.isatty(self._fd):
			raise TerminalError("An interactive terminal is required")
		self._saved = termios.tcgetattr(self._fd)
		tty.setcbreak(self._fd)
		return self

	def __exit__(self, *exc_info: object) -> None:
		if self._saved is not None:
			termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
			self._saved = None

	def _flush_carry(self) -> None:
		if self._carry:
			self._pending.extend(decode_keys(self._carry))
			self._carry = ""

	def _read_available(self) -> None:
		try:
			data = os.read(self._fd, 64)
		except OSError as exc:
			logger.error("Error reading from terminal: %s", exc)
			data = b""
		if not data:
			# Nothing more can be typed once stdin is closed.
			self._eof = True
			self._flush_carry()
			self._pending.append(KEY_CTRL_C)
			return
		text = self._carry + self._decoder.decode(data)
		cut = incomplete_escape_start(text)
		self._carry = text[cut:]
		self._pending.extend(decode_keys(text[:cut]))

	def _wait_and_read(self, timeout: float) -> bool:
		ready, _, _ = select.select([self._fd], [], [], timeout)
		if ready:
			self._read_available()
		return bool(ready)

	def poll(self, timeout: float) -> str | None:
		"""Next key, or None once `timeout` seconds pass without input."""
		if not self._pending:
			if self._eof:
				time.sleep(timeout)
				return None
			self._wait_and_read(timeout)
			while self._carry and not self._eof:
				if not self._wait_and_read(ESCAPE_TIMEOUT):
					self._flush_carry()
		if self._pending:
			return self._pending.popleft()
		return None
