"""Script registry — a segment trie keyed by script name.

Scripts are registered during setup and the registry is compiled
(frozen) when the controller freezes. Lookups normalize slashes the way a
filesystem does (``reports//List.py`` finds ``reports/List.py``) and are
case-sensitive.
"""

from steeple.errors import ConfigurationError
from steeple.routing.script import Script


def split_name(name: str) -> list[str]:
    """Split a script name into its non-empty path segments.

    Examples::

        "ListEvents.py"          -> ["ListEvents.py"]
        "/reports/ReportList.py" -> ["reports", "ReportList.py"]
        ""                       -> []
    """
    return [part for part in name.strip("/").split("/") if part]


class _TrieNode:
    """A node in the script trie. Mutable during registration only."""

    __slots__ = ("children", "script")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.script: Script | None = None


class ScriptRegistry:
    """Explicit name -> handler table.

    Usage::

        registry = ScriptRegistry()
        registry.add(Script("ListEvents.py", list_events))
        registry.compile()
        registry.lookup("ListEvents.py")   # Script(...)
        registry.lookup("Missing.py")      # None
    """

    __slots__ = ("_compiled", "_count", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False
        self._count = 0

    def add(self, script: Script) -> None:
        """Add a script. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add scripts after compilation."
            raise RuntimeError(msg)

        segments = split_name(script.name)
        if not segments:
            msg = f"Script name {script.name!r} is empty."
            raise ConfigurationError(msg)
        if ".." in segments or "." in segments:
            msg = f"Script name {script.name!r} must not contain '.' or '..' segments."
            raise ConfigurationError(msg)

        node = self._root
        for segment in segments:
            node = node.children.setdefault(segment, _TrieNode())

        if node.script is not None:
            msg = (
                f"Script {script.name!r} is already registered "
                f"(handler {getattr(node.script.handler, '__qualname__', node.script.handler)!r})."
            )
            raise ConfigurationError(msg)
        node.script = script
        self._count += 1

    def compile(self) -> None:
        """Freeze the registry. No more scripts can be added."""
        self._compiled = True

    def lookup(self, name: str) -> Script | None:
        """Return the script registered under *name*, or ``None``."""
        segments = split_name(name)
        if not segments:
            return None
        node = self._root
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node.script

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return self._count

    @property
    def scripts(self) -> list[Script]:
        """All registered scripts, sorted by name."""
        result: list[Script] = []
        self._collect(self._root, result)
        return sorted(result, key=lambda s: s.name)

    def _collect(self, node: _TrieNode, result: list[Script]) -> None:
        if node.script is not None:
            result.append(node.script)
        for child in node.children.values():
            self._collect(child, result)
