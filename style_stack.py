"""
Style stack for nested inline emphasis tags.

``StyleStack`` tracks the style in effect while a description is scanned.
How a closing tag is matched against the open ones is delegated to a
``ClosingPolicy`` so the scan loop never has to know about it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from config import TagType
from errors import MismatchedStyleError, UnbalancedStyleError
from models import TextStyle


# ── closing policies ──────────────────────────────────────────────────────


class ClosingPolicy(ABC):
    """Decides which snapshot a closing style tag restores."""

    @abstractmethod
    def close(
        self,
        stack: list[tuple[TagType, TextStyle]],
        tag: TagType,
    ) -> TextStyle:
        """Pop from *stack* for closing *tag* and return the style to adopt.

        *stack* is never empty when this is called.
        """
        ...


class PermissiveClosing(ClosingPolicy):
    """Pop the innermost snapshot whatever the closing tag's name is.

    ``<b><i>x</b></i>`` therefore closes cleanly.
    """

    def close(self, stack, tag):
        _, style = stack.pop()
        return style


class StrictClosing(ClosingPolicy):
    """Only accept a closing tag that names the innermost open tag."""

    def close(self, stack, tag):
        opened, style = stack[-1]
        if opened is not tag:
            raise MismatchedStyleError(
                f"</{tag.value}> closes <{opened.value}>"
            )
        stack.pop()
        return style


# ── StyleStack ────────────────────────────────────────────────────────────


class StyleStack:
    """LIFO of style snapshots, one per currently open style tag.

    Lives for a single scan only.
    """

    def __init__(self, policy: ClosingPolicy | None = None) -> None:
        self._policy = policy or PermissiveClosing()
        self._stack: list[tuple[TagType, TextStyle]] = []
        self.current = TextStyle()

    @property
    def depth(self) -> int:
        return len(self._stack)

    def open(self, tag: TagType) -> TextStyle:
        """Save the current style and switch on the attribute for *tag*."""
        styled = self.current.with_tag(tag)
        self._stack.append((tag, self.current))
        self.current = styled
        return styled

    def close(self, tag: TagType) -> TextStyle:
        """Restore the style saved by the matching open tag.

        Raises
        ------
        UnbalancedStyleError
            If no style tag is open.
        """
        if not self._stack:
            raise UnbalancedStyleError(
                f"</{tag.value}> without a matching opening tag"
            )
        self.current = self._policy.close(self._stack, tag)
        return self.current
