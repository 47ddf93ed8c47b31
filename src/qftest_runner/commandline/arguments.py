"""Argument list with override presets.

An ArgumentList collects command-line tokens in invocation order. Presets
registered beforehand decide what happens when a matching key is appended
later:

- ENFORCE: emit the key (and value) now, drop every later occurrence
- DROP: drop the key, and the token after it when a value was registered
- OVERWRITE: keep the key, replace the token after it with a fixed value
- DEFAULT: emit key and value now, relocate them if the key shows up again
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from enum import Enum

from ..errors import InvalidPresetError


class PresetType(Enum):
    """How an appended key is treated."""

    ENFORCE = "enforce"
    OVERWRITE = "overwrite"
    DROP = "drop"
    DEFAULT = "default"


class AppendState(Enum):
    """State carried from one append call to the next."""

    NORMAL = "normal"
    SUPPRESS_NEXT = "suppress_next"  # previous key owns the next token


class ArgumentList:
    """Ordered command-line tokens with ENFORCE/DROP/OVERWRITE/DEFAULT rules."""

    def __init__(self) -> None:
        self._tokens: list[str] = []
        # ENFORCE and DROP both end up here: key -> value (None = key only)
        self._drops: dict[str, str | None] = {}
        self._overwrites: dict[str, str] = {}
        self._defaults: dict[str, str] = {}
        # key -> [start, length] of its current emission in _tokens
        self._default_spans: dict[str, list[int]] = {}
        self._pending_default: str | None = None
        self.state = AppendState.NORMAL

    def preset(self, kind: PresetType, key: str, value: str | None = None) -> ArgumentList:
        """Register a preset for ``key``.

        Args:
            kind: Preset type
            key: Flag token the rule applies to (e.g. "-report")
            value: Value token; required for OVERWRITE and DEFAULT

        Returns:
            self, so registrations can be chained

        Raises:
            InvalidPresetError: OVERWRITE or DEFAULT without a value
        """
        if kind in (PresetType.OVERWRITE, PresetType.DEFAULT) and value is None:
            raise InvalidPresetError(
                message=f"Preset {kind.name} for '{key}' requires a value argument",
                data={"kind": kind.value, "key": key},
            )

        if kind == PresetType.ENFORCE:
            self.append_literal(key)
            if value is not None:
                self.append_literal(value)
            self._drops[key] = value
        elif kind == PresetType.DROP:
            self._drops[key] = value
        elif kind == PresetType.OVERWRITE:
            self._overwrites[key] = value
        elif kind == PresetType.DEFAULT:
            if key in self._default_spans:
                self._remove_span(key)
            self._default_spans[key] = [len(self._tokens), 2]
            self._tokens.extend((key, value))
            self._defaults[key] = value
        return self

    def append(self, token: str) -> ArgumentList:
        """Append a token, applying the registered presets."""
        pending_default, self._pending_default = self._pending_default, None

        if self.state == AppendState.SUPPRESS_NEXT:
            self.state = AppendState.NORMAL

        elif token in self._drops:
            if self._drops[token] is not None:
                self.state = AppendState.SUPPRESS_NEXT

        elif token in self._overwrites:
            self._tokens.append(token)
            self._tokens.append(self._overwrites[token])
            self.state = AppendState.SUPPRESS_NEXT

        elif token in self._defaults:
            # An explicit occurrence replaces the placeholder (or an earlier
            # explicit occurrence) and takes the next plain token as its value.
            if token in self._default_spans:
                self._remove_span(token)
            self._default_spans[token] = [len(self._tokens), 1]
            self._tokens.append(token)
            self._pending_default = token

        else:
            self._tokens.append(token)
            if pending_default is not None:
                self._default_spans[pending_default][1] += 1

        return self

    def extend(self, tokens: Iterable[str]) -> ArgumentList:
        """Append several tokens in order."""
        for token in tokens:
            self.append(token)
        return self

    def append_tokenized(self, text: str | None) -> ArgumentList:
        """Split ``text`` on whitespace and append each token."""
        return self.extend(tokenize(text))

    def reset_state(self) -> ArgumentList:
        """Forget a pending skip, e.g. when a group of tokens ends with a key."""
        self.state = AppendState.NORMAL
        self._pending_default = None
        return self

    def append_literal(self, token: str) -> ArgumentList:
        """Append a token as-is, bypassing presets and the append state."""
        self._tokens.append(token)
        return self

    def to_list(self) -> list[str]:
        """Return a copy of the tokens."""
        return list(self._tokens)

    def _remove_span(self, key: str) -> None:
        start, length = self._default_spans.pop(key)
        removed = len(self._tokens[start : start + length])
        del self._tokens[start : start + length]
        for span in self._default_spans.values():
            if span[0] > start:
                span[0] -= removed

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __str__(self) -> str:
        return " ".join(self._tokens)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._tokens!r})"


def tokenize(text: str | None) -> list[str]:
    """Split a custom parameter string into tokens on whitespace."""
    if not text:
        return []
    return text.split()
