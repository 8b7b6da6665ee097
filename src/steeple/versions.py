"""Python version requirement — read from the project manifest.

The manifest (``pyproject.toml``) is the single source of truth for the
minimum supported interpreter. ``[project].requires-python`` is read on
every check, so a deploy that bumps the requirement takes effect without
a restart.
"""

import platform
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from steeple.errors import RequirementError

# Clauses that carry a lower bound, in the order they are tried
_LOWER_BOUND_OPERATORS = ("~=", ">=", "==", ">")

_CLAUSE_RE = re.compile(r"^\s*(~=|>=|==|>)\s*([0-9][0-9.]*)(?:\.\*)?\s*$")
_PART_RE = re.compile(r"^(\d+)")


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted version into a tuple of ints.

    Each part keeps only its leading digits, so pre-release tags are
    ignored (``"3.13.0rc1"`` -> ``(3, 13, 0)``).

    Raises ``ValueError`` if a part has no leading digits.
    """
    parts: list[int] = []
    for part in version.strip().split("."):
        match = _PART_RE.match(part)
        if match is None:
            msg = f"Invalid version {version!r}"
            raise ValueError(msg)
        parts.append(int(match.group(1)))
    return tuple(parts)


def version_below(running: str, required: str) -> bool:
    """True if *running* is strictly older than *required*.

    Missing trailing parts compare as shorter tuples: ``3.12.0`` satisfies
    ``3.12``.
    """
    return parse_version(running) < parse_version(required)


def minimum_from_specifier(specifier: str) -> str:
    """Extract the lower-bound version from a ``requires-python`` specifier.

    ``">=3.12"`` -> ``"3.12"``, ``">=3.11,<4"`` -> ``"3.11"``,
    ``"~=3.12.1"`` -> ``"3.12.1"``.

    Raises ``RequirementError`` if no clause carries a lower bound.
    """
    bounds: dict[str, str] = {}
    for clause in specifier.split(","):
        match = _CLAUSE_RE.match(clause)
        if match is not None:
            bounds.setdefault(match.group(1), match.group(2).rstrip("."))

    for operator in _LOWER_BOUND_OPERATORS:
        if operator in bounds:
            return bounds[operator]

    msg = f"requires-python {specifier!r} declares no minimum version"
    raise RequirementError(msg)


@dataclass(frozen=True, slots=True)
class PyprojectManifest:
    """Version manifest backed by a ``pyproject.toml`` file."""

    path: Path

    def required_version(self) -> str:
        """Return the minimum Python version declared by the manifest.

        Raises ``RequirementError`` if the file is missing, unreadable,
        or does not declare ``[project].requires-python``.
        """
        try:
            with self.path.open("rb") as fh:
                data = tomllib.load(fh)
        except FileNotFoundError:
            msg = f"Version manifest not found: {self.path}"
            raise RequirementError(msg) from None
        except (OSError, tomllib.TOMLDecodeError) as exc:
            msg = f"Unable to read version manifest {self.path}: {exc}"
            raise RequirementError(msg) from exc

        project = data.get("project")
        specifier = project.get("requires-python") if isinstance(project, dict) else None
        if not isinstance(specifier, str) or not specifier.strip():
            msg = f"{self.path} does not declare [project].requires-python"
            raise RequirementError(msg)

        return minimum_from_specifier(specifier)


def running_version() -> str:
    """The version of the interpreter serving the request."""
    return platform.python_version()
