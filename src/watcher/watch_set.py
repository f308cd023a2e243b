"""Watch set: the globs that trigger a rebuild or a browser reload."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Pattern, Tuple

from .models import Role

_WILDCARDS = set("*?[")

DEFAULT_SOURCE_GLOB = "src/**/*.elm"

# Static assets under the served directory that only need a reload.
DEFAULT_ASSET_GLOBS = (
    "index.html",
    "css/**/*.css",
    "config.json",
)


def glob_to_regex(pattern: str) -> Pattern:
    """
    Translate a path glob into a compiled regular expression.

    `*` and `?` never cross a `/`; `**/` matches zero or more directories
    and a trailing `**` matches anything below.
    """
    out = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:[^/]*/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")


def _anchor(base_dir: Path, pattern: str) -> str:
    """
    Absolute glob with its literal prefix resolved.

    Event paths are fully resolved before classification, so `..` parts and
    symlinks in the literal part must be resolved here too.
    """
    parts = (base_dir / pattern).parts
    for i, part in enumerate(parts):
        if _WILDCARDS & set(part):
            prefix = Path(*parts[:i]).resolve().as_posix().rstrip("/")
            return "/".join([prefix, *parts[i:]])
    return (base_dir / pattern).resolve().as_posix()


def _static_prefix(pattern: Path) -> Path:
    """Longest leading part of an absolute glob that has no wildcards."""
    parts = pattern.parts
    literal = []
    for part in parts:
        if _WILDCARDS & set(part):
            return Path(*literal)
        literal.append(part)
    # A literal file: watch the directory holding it.
    return Path(*literal).parent


@dataclass(frozen=True)
class WatchEntry:
    """One glob of the watch set together with its role."""
    pattern: str
    role: Role
    regex: Pattern

    def matches(self, path: Path) -> bool:
        return self.regex.fullmatch(path.as_posix()) is not None


class WatchSet:
    """
    Ordered, immutable list of path globs partitioned by role.

    All globs are anchored at ``base_dir`` so that classification works on
    the absolute paths reported by the file system watcher.
    """

    def __init__(self, entries: List[Tuple[str, Role]], base_dir: Optional[Path] = None):
        self.base_dir = (base_dir or Path.cwd()).resolve()
        built = []
        for pattern, role in entries:
            absolute = _anchor(self.base_dir, pattern)
            built.append(WatchEntry(absolute, role, glob_to_regex(absolute)))
        self._entries: Tuple[WatchEntry, ...] = tuple(built)

    @classmethod
    def from_options(
        cls,
        options,
        source_glob: str = DEFAULT_SOURCE_GLOB,
        asset_globs=DEFAULT_ASSET_GLOBS,
        base_dir: Optional[Path] = None,
    ) -> "WatchSet":
        """
        Build the watch set for a set of CLI options.

        Sources trigger a rebuild. The build output comes first among the
        reload triggers, followed by the static assets under the served
        directory.
        """
        entries: List[Tuple[str, Role]] = [(source_glob, Role.COMPILE)]
        entries.append((Path(options.output_path).as_posix(), Role.RELOAD))
        source_dir = Path(options.source_dir).as_posix().rstrip("/")
        for glob in asset_globs:
            entries.append((f"{source_dir}/{glob}", Role.RELOAD))
        return cls(entries, base_dir=base_dir)

    @property
    def entries(self) -> Tuple[WatchEntry, ...]:
        return self._entries

    def patterns(self, role: Role) -> List[str]:
        """Return the absolute globs having the given role, in order."""
        return [e.pattern for e in self._entries if e.role is role]

    def classify(self, path: Path) -> Optional[Role]:
        """
        Return the role of the first glob matching ``path``.

        Args:
            path: Absolute path of a changed file

        Returns:
            The role, or None when the path is not in the watch set
        """
        for entry in self._entries:
            if entry.matches(path):
                return entry.role
        return None

    def watch_roots(self) -> List[Path]:
        """
        Minimal list of existing directories that cover every glob.

        Missing directories are replaced by their nearest existing ancestor
        without climbing above ``base_dir``; roots nested in another root
        are dropped since observers are recursive.
        """
        candidates = []
        for entry in self._entries:
            root = _static_prefix(Path(entry.pattern))
            while not root.is_dir() and root != self.base_dir and root != root.parent:
                if self.base_dir in root.parents:
                    root = root.parent
                else:
                    break
            if root.is_dir():
                candidates.append(root)

        roots: List[Path] = []
        for root in sorted(set(candidates), key=lambda p: (len(p.parts), str(p))):
            if any(root == r or r in root.parents for r in roots):
                continue
            roots.append(root)
        return roots

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)
