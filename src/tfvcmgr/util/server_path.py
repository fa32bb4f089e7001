"""Server path helpers ("$/Project/folder/file.txt")."""

from __future__ import annotations

from tfvcmgr.errors import InvalidServerPathError

ROOT_NAME_ONLY: str = "$"
ROOT: str = "$/"
SEPARATOR: str = "/"

_SEPARATORS: tuple[str, ...] = ("/", "\\")


def canonicalize(server_path: str) -> str:
    """
    Return the canonical form of a server path.

    - Backslashes become forward slashes, repeated separators collapse.
    - "$" alone becomes "$/".
    - No trailing separator except for the root.

    Raises:
        InvalidServerPathError: if the path does not start with "$/" (or is "$").
    """
    if not isinstance(server_path, str) or not server_path.strip():
        raise InvalidServerPathError("Server path must be a non-empty string")

    s = server_path.strip()
    for sep in _SEPARATORS[1:]:
        s = s.replace(sep, SEPARATOR)

    if s == ROOT_NAME_ONLY:
        return ROOT
    if not s.startswith(ROOT):
        raise InvalidServerPathError(
            f"Server path must start with '{ROOT}': {server_path}",
            details={"server_path": server_path},
        )

    parts = split(s)
    if len(parts) == 1:
        return ROOT
    return ROOT + SEPARATOR.join(parts[1:])


def key(server_path: str) -> str:
    """Case-folded canonical path, for use as a dict key."""
    return canonicalize(server_path).casefold()


def equals(path1: str, path2: str) -> bool:
    """Compare two server paths, ignoring case."""
    return key(path1) == key(path2)


def is_root(server_path: str) -> bool:
    return canonicalize(server_path) == ROOT


def split(server_path: str) -> list[str]:
    """Split into components; the root component is returned as "$/"."""
    segments: list[str] = []
    current: list[str] = []

    for ch in server_path:
        if ch in _SEPARATORS:
            if current:
                segment = "".join(current)
                segments.append(ROOT if segment == ROOT_NAME_ONLY else segment)
                current = []
        else:
            current.append(ch)

    if current:
        segment = "".join(current)
        segments.append(ROOT if segment == ROOT_NAME_ONLY else segment)

    return segments


def get_hierarchy(server_path: str) -> list[str]:
    """
    Return the chain of paths leading to server_path.

    Root is first, the path itself is last:
        "$/A/b" -> ["$/", "$/A", "$/A/b"]
    """
    parts = split(canonicalize(server_path))
    hierarchy: list[str] = []
    for i in range(1, len(parts) + 1):
        if i == 1:
            hierarchy.append(ROOT)
        else:
            hierarchy.append(ROOT + SEPARATOR.join(parts[1:i]))
    return hierarchy


def get_parent(server_path: str) -> str:
    """Return the parent folder path. The parent of the root is the root."""
    path = canonicalize(server_path)
    if path == ROOT:
        return ROOT

    idx = path.rfind(SEPARATOR)
    parent = path[:idx]
    if parent == ROOT_NAME_ONLY:
        return ROOT
    return parent


def get_file_name(server_path: str) -> str:
    """Return the last path component ("" for the root)."""
    path = canonicalize(server_path)
    if path == ROOT:
        return ""
    return path[path.rfind(SEPARATOR) + 1:]


def combine(parent: str, relative: str) -> str:
    """
    Combine a parent path with a relative path.

    An absolute relative path ("$/...") replaces the parent.
    """
    if relative is None:
        raise InvalidServerPathError("relative must not be None")
    if not relative or relative == ROOT_NAME_ONLY:
        return canonicalize(parent)
    if relative.startswith(ROOT) or relative[0] in _SEPARATORS:
        if relative[0] in _SEPARATORS:
            return canonicalize(ROOT_NAME_ONLY + relative)
        return canonicalize(relative)

    base = canonicalize(parent)
    if not base.endswith(SEPARATOR):
        base = base + SEPARATOR
    return canonicalize(base + relative)


def is_child(parent_path: str, possible_child: str) -> bool:
    """
    Return True if possible_child is parent_path or lies below it.

    Case is ignored. A path is considered a child of itself.
    """
    parent = key(parent_path)
    child = key(possible_child)

    if not child.startswith(parent):
        return False
    if len(parent) == len(child):
        return True
    if parent.endswith(SEPARATOR):
        return True
    return child[len(parent)] == SEPARATOR


def is_strict_child(parent_path: str, possible_child: str) -> bool:
    """Return True if possible_child lies below parent_path (not equal to it)."""
    return is_child(parent_path, possible_child) and not equals(parent_path, possible_child)


def is_direct_child(folder_path: str, possible_child: str) -> bool:
    return not is_root(possible_child) and equals(folder_path, get_parent(possible_child))


def make_relative(server_path: str, relative_to: str) -> str:
    """
    Return server_path relative to relative_to.

    If server_path is not below relative_to it is returned canonicalized.
    """
    path = canonicalize(server_path)
    base = canonicalize(relative_to)

    if not is_child(base, path):
        return path
    if len(path) == len(base):
        return ""
    if base.endswith(SEPARATOR):
        return path[len(base):]
    return path[len(base) + 1:]


def get_team_project(server_path: str) -> str:
    """
    Return the team project path ("$/Project") that server_path lives in.

    The root returns the root; a team project returns itself.
    """
    path = canonicalize(server_path)
    if path == ROOT:
        return path

    idx = path.find(SEPARATOR, len(ROOT))
    if idx < 0:
        return path
    return path[:idx]


def get_folder_depth(server_path: str) -> int:
    """Root is depth 0, team projects are 1, "$/Proj/a" is 2."""
    path = canonicalize(server_path)
    if path == ROOT:
        return 0
    return path.count(SEPARATOR)


def compare_top_down(path1: str, path2: str) -> int:
    """
    Order paths so that parents sort before their children.

    Components are compared case-insensitively one at a time; a shorter
    path that is a prefix of a longer one sorts first.
    """
    parts1 = [p.casefold() for p in split(canonicalize(path1))]
    parts2 = [p.casefold() for p in split(canonicalize(path2))]

    for a, b in zip(parts1, parts2):
        if a != b:
            return -1 if a < b else 1

    return (len(parts1) > len(parts2)) - (len(parts1) < len(parts2))
