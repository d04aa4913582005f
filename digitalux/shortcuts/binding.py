"""Key bindings — normalized modifier set plus base key.

Canonical form orders modifiers Ctrl, Cmd, Alt, Shift and ends with the key
token, joined by ``+``: ``Ctrl+Shift+Z``, ``Alt+F4``, ``Ctrl+Plus``, ``Space``.
Parsing accepts any modifier order and case, common aliases (``Control``,
``Meta``, ``Option``, ``Esc``, ``Del``), a literal ``+`` / ``-`` key, and the
toolkit accelerator form ``ctrl shift Z``.  ``KeyBinding.parse(str(b)) == b``
for every binding.

Raw capture events (what a key listener reports) are converted with
``KeyBinding.from_event``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


MODIFIER_ORDER = ("Ctrl", "Cmd", "Alt", "Shift")

_MODIFIER_ALIASES = {
    "ctrl": "Ctrl", "control": "Ctrl", "ctl": "Ctrl",
    "cmd": "Cmd", "command": "Cmd", "meta": "Cmd", "super": "Cmd", "win": "Cmd",
    "alt": "Alt", "option": "Alt", "opt": "Alt", "altgraph": "Alt",
    "shift": "Shift",
}

_NAMED_KEYS = {
    "space": "Space", " ": "Space", "spacebar": "Space",
    "plus": "Plus", "+": "Plus", "add": "Plus",
    "minus": "Minus", "-": "Minus", "subtract": "Minus",
    "escape": "Escape", "esc": "Escape",
    "delete": "Delete", "del": "Delete",
    "backspace": "Backspace", "back_space": "Backspace",
    "enter": "Enter", "return": "Enter",
    "tab": "Tab",
    "insert": "Insert", "ins": "Insert",
    "home": "Home", "end": "End",
    "pageup": "PageUp", "page_up": "PageUp",
    "pagedown": "PageDown", "page_down": "PageDown",
    "up": "Up", "arrowup": "Up",
    "down": "Down", "arrowdown": "Down",
    "left": "Left", "arrowleft": "Left",
    "right": "Right", "arrowright": "Right",
    "comma": "Comma", ",": "Comma",
    "period": "Period", ".": "Period",
    "slash": "Slash", "/": "Slash",
}

# Pure modifier key names as reported by key listeners; pressing one of
# these alone never completes a binding.
MODIFIER_KEY_NAMES = frozenset({
    "shift", "control", "ctrl", "alt", "altgraph", "meta", "os", "super", "command", "cmd",
})

_FUNCTION_KEY = re.compile(r"^f([1-9]|1[0-9]|2[0-4])$")

# Toolkit accelerator names for the named keys that differ from canonical.
_ACCELERATOR_NAMES = {"Plus": "PLUS", "Minus": "MINUS", "Space": "SPACE", "Escape": "ESCAPE",
                      "Delete": "DELETE", "Enter": "ENTER", "Tab": "TAB",
                      "Backspace": "BACK_SPACE", "PageUp": "PAGE_UP", "PageDown": "PAGE_DOWN",
                      "Up": "UP", "Down": "DOWN", "Left": "LEFT", "Right": "RIGHT",
                      "Insert": "INSERT", "Home": "HOME", "End": "END",
                      "Comma": "COMMA", "Period": "PERIOD", "Slash": "SLASH"}


class BindingError(ValueError):
    """A key combination string or event that is not a well-formed binding."""


def normalize_key(token: str) -> str | None:
    """Canonical key token for ``token``, or None if it is not a valid base key."""
    if not token:
        return None
    low = token.lower()
    if low in _NAMED_KEYS:
        return _NAMED_KEYS[low]
    if len(token) == 1 and token.isascii() and token.isalnum():
        return token.upper()
    if _FUNCTION_KEY.match(low):
        return low.upper()
    if low.startswith("key") and len(low) == 4 and low[3].isalpha():
        return low[3].upper()               # DOM code "KeyZ"
    if low.startswith("digit") and len(low) == 6 and low[5].isdigit():
        return low[5]                       # DOM code "Digit0"
    return None


def normalize_modifier(token: str) -> str | None:
    return _MODIFIER_ALIASES.get(token.strip().lower())


def _split(text: str) -> list[str]:
    if "+" not in text:
        # Accelerator form "ctrl shift N", or a lone key
        return text.split()
    parts = [p.strip() for p in text.split("+")]
    # "Ctrl++" / "+" : the last '+' is the key itself
    if len(parts) >= 2 and parts[-1] == "" and parts[-2] == "":
        parts = parts[:-2] + ["+"]
    return parts


@dataclass(frozen=True)
class KeyBinding:
    key: str
    modifiers: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "modifiers", frozenset(self.modifiers))
        unknown = set(self.modifiers) - set(MODIFIER_ORDER)
        if unknown:
            raise BindingError(f"Unknown modifiers {sorted(unknown)}")
        if normalize_key(self.key) != self.key:
            raise BindingError(f"'{self.key}' is not a canonical key token")

    # ── Decoding ───────────────────────────────────────────────────

    @classmethod
    def parse(cls, text: str) -> KeyBinding:
        """Parse a binding string.  Raises BindingError if malformed."""
        if not isinstance(text, str) or not text.strip():
            raise BindingError("Empty key combination")
        parts = _split(text.strip())
        if any(p == "" for p in parts):
            raise BindingError(f"Empty key in '{text}'")

        *mod_tokens, key_token = parts
        modifiers: set[str] = set()
        for tok in mod_tokens:
            mod = normalize_modifier(tok)
            if mod is None:
                raise BindingError(f"'{tok}' is not a modifier in '{text}'")
            modifiers.add(mod)

        if normalize_modifier(key_token) is not None:
            raise BindingError(f"'{text}' has no base key")
        key = normalize_key(key_token)
        if key is None:
            raise BindingError(f"Unknown key '{key_token}' in '{text}'")
        return cls(key=key, modifiers=frozenset(modifiers))

    @classmethod
    def from_event(
        cls,
        key: str,
        ctrl: bool = False,
        alt: bool = False,
        shift: bool = False,
        meta: bool = False,
    ) -> KeyBinding | None:
        """Binding for a raw key-press event.

        Returns None when ``key`` is a pure modifier (keep waiting for the
        real key); raises BindingError for keys that cannot be bound.
        """
        if key.strip().lower() in MODIFIER_KEY_NAMES and key.strip():
            return None
        token = normalize_key(key)
        if token is None:
            raise BindingError(f"Key '{key}' cannot be bound")
        mods = {name for name, on in (("Ctrl", ctrl), ("Alt", alt), ("Shift", shift), ("Cmd", meta)) if on}
        return cls(key=token, modifiers=frozenset(mods))

    # ── Encoding ───────────────────────────────────────────────────

    @property
    def ordered_modifiers(self) -> list[str]:
        return [m for m in MODIFIER_ORDER if m in self.modifiers]

    def canonical(self) -> str:
        return "+".join([*self.ordered_modifiers, self.key])

    def __str__(self) -> str:
        return self.canonical()

    def to_accelerator(self) -> str:
        """Toolkit form, e.g. ``ctrl shift N`` / ``ctrl PLUS``."""
        mods = [("meta" if m == "Cmd" else m.lower()) for m in self.ordered_modifiers]
        return " ".join([*mods, _ACCELERATOR_NAMES.get(self.key, self.key)])


def canonicalize(text: str) -> str:
    """Canonical string for a binding string.  Raises BindingError."""
    return KeyBinding.parse(text).canonical()


def is_valid_binding(text: str) -> bool:
    try:
        KeyBinding.parse(text)
    except BindingError:
        return False
    return True
