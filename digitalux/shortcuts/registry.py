"""Shortcut registry — default key bindings, user overrides and their file.

The registry is built once at startup and handed to every consumer; there
is no module-level instance.

Persistence file (``~/.digital-shortcuts.cfg``)::

    # comment lines start with '#', blank lines ignored
    <actionId>=<binding>

Only overrides (bindings that differ from the default) are written.  Lines
without ``=``, with an empty key or with an unparseable binding are skipped
on load.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .binding import BindingError, KeyBinding, canonicalize

log = logging.getLogger("digitalux.shortcuts")

FILE_HEADER = (
    "# Digital Simulator - Custom Keyboard Shortcuts",
    "# Format: actionId=Shortcut",
    "# Restart application after changes",
)


class UnknownActionError(KeyError):
    """An action id that was never registered."""

    def __init__(self, action_id: str) -> None:
        self.action_id = action_id
        super().__init__(action_id)

    def __str__(self) -> str:
        return f"Unknown action '{self.action_id}'"


class ShortcutSaveError(OSError):
    """Writing the shortcut file failed; the in-memory registry is unchanged."""


@dataclass
class ShortcutEntry:
    action_id: str
    description: str
    default_binding: str
    current_binding: str = ""

    def __post_init__(self) -> None:
        if not self.current_binding:
            self.current_binding = self.default_binding

    @property
    def is_overridden(self) -> bool:
        return self.current_binding != self.default_binding


@dataclass
class ShortcutRegistry:
    path: Path | None = None
    _entries: list[ShortcutEntry] = field(default_factory=list, init=False, repr=False)
    _by_id: dict[str, ShortcutEntry] = field(default_factory=dict, init=False, repr=False)
    _overrides: dict[str, str] = field(default_factory=dict, init=False, repr=False)
    _registered: bool = field(default=False, init=False)
    loaded: bool = field(default=False, init=False)

    # ── Registration ───────────────────────────────────────────────

    def register(self, defaults: Iterable[tuple[str, str, str] | ShortcutEntry]) -> None:
        """Seed the ordered entry list.  May only be called once."""
        if self._registered:
            raise RuntimeError("Shortcut defaults are already registered")
        for item in defaults:
            if isinstance(item, ShortcutEntry):
                action_id, description, default = item.action_id, item.description, item.default_binding
            else:
                action_id, description, default = item
            if action_id in self._by_id:
                raise ValueError(f"Duplicate action id '{action_id}'")
            entry = ShortcutEntry(action_id, description, canonicalize(default))
            if action_id in self._overrides:
                entry.current_binding = self._overrides[action_id]
            self._entries.append(entry)
            self._by_id[action_id] = entry
        self._registered = True

    @property
    def entries(self) -> list[ShortcutEntry]:
        return list(self._entries)

    @property
    def overrides(self) -> dict[str, str]:
        return dict(self._overrides)

    def entry(self, action_id: str) -> ShortcutEntry:
        try:
            return self._by_id[action_id]
        except KeyError:
            raise UnknownActionError(action_id) from None

    # ── Lookup / edit ──────────────────────────────────────────────

    def get_binding(self, action_id: str) -> str:
        """Effective binding: the override if one is set, else the default."""
        return self.entry(action_id).current_binding

    def get_key_binding(self, action_id: str) -> KeyBinding:
        return KeyBinding.parse(self.get_binding(action_id))

    def set_binding(self, action_id: str, binding: str | KeyBinding) -> str:
        """Validate and record a new binding; it reaches the file on save().

        Duplicate bindings across actions are not checked: last write wins.
        """
        entry = self.entry(action_id)
        canonical = binding.canonical() if isinstance(binding, KeyBinding) else canonicalize(binding)
        entry.current_binding = canonical
        return canonical

    def conflicts(self) -> dict[str, list[str]]:
        """Current bindings shared by more than one action (informational)."""
        by_binding: dict[str, list[str]] = {}
        for e in self._entries:
            by_binding.setdefault(e.current_binding, []).append(e.action_id)
        return {b: ids for b, ids in by_binding.items() if len(ids) > 1}

    def reset_all(self) -> None:
        """Restore every default and rewrite the file with no overrides."""
        for entry in self._entries:
            entry.current_binding = entry.default_binding
        self._overrides.clear()
        self._write()

    # ── Persistence ────────────────────────────────────────────────

    def load(self) -> None:
        """Read overrides from the file once; later calls are no-ops.

        A missing or unreadable file means "no overrides".
        """
        if self.loaded:
            return
        self.loaded = True
        if self.path is None or not self.path.exists():
            return
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read shortcuts from %s: %s", self.path, exc, exc_info=True)
            return

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            key, value = key.strip(), value.strip()
            if not sep or not key or not value:
                continue
            try:
                self._overrides[key] = canonicalize(value)
            except BindingError:
                log.debug("Skipping malformed shortcut line %r", raw_line)
                continue

        for action_id, binding in self._overrides.items():
            entry = self._by_id.get(action_id)
            if entry is not None:
                entry.current_binding = binding
        log.info("Loaded %d shortcut override(s) from %s", len(self._overrides), self.path)

    def save(self) -> None:
        """Fold current bindings into the override set and write it.

        Entries back at their default drop out of the file.
        """
        for entry in self._entries:
            if entry.is_overridden:
                self._overrides[entry.action_id] = entry.current_binding
            else:
                self._overrides.pop(entry.action_id, None)
        self._write()

    def _write(self) -> None:
        if self.path is None:
            return
        lines = [*FILE_HEADER, *(f"{k}={v}" for k, v in self._overrides.items())]
        # A failed write must leave the previous file intact.
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text("\n".join(lines) + "\n", encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                log.warning("Could not remove %s", tmp)
            log.error("Failed to save shortcuts to %s: %s", self.path, exc)
            raise ShortcutSaveError(f"Failed to save shortcuts: {exc}") from exc


def create_registry(path: Path | None, defaults: Iterable[tuple[str, str, str]] | None = None) -> ShortcutRegistry:
    """Registry with the compiled-in defaults registered and the file loaded."""
    from .defaults import DEFAULT_SHORTCUTS

    registry = ShortcutRegistry(path=path)
    registry.register(DEFAULT_SHORTCUTS if defaults is None else defaults)
    registry.load()
    return registry
