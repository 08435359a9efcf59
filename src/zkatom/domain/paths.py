"""Node path conventions for atoms in the hierarchical namespace."""

DATA_NODE = "data"
LOCK_NODE = "lock"


def validate_path(path: str) -> str:
    """
    Check that path is absolute and well formed.

    Returns:
        The path unchanged

    Raises:
        ValueError: If the path is relative, has empty segments or a
            trailing slash
    """
    if not path.startswith("/"):
        raise ValueError(f"Path must be absolute: {path!r}")
    if path == "/":
        return path
    if path.endswith("/"):
        raise ValueError(f"Path must not end with '/': {path!r}")
    if "" in path[1:].split("/"):
        raise ValueError(f"Path has an empty segment: {path!r}")
    return path


def join(parent: str, name: str) -> str:
    if parent == "/":
        return f"/{name}"
    return f"{parent}/{name}"


def data_path(atom_path: str) -> str:
    """Node holding the serialized value of the atom at atom_path."""
    return join(validate_path(atom_path), DATA_NODE)


def lock_path(atom_path: str) -> str:
    """Subtree used by the write lock of the atom at atom_path."""
    return join(validate_path(atom_path), LOCK_NODE)


def parent_path(path: str) -> str:
    validate_path(path)
    if path == "/":
        raise ValueError("Root has no parent")
    head = path.rsplit("/", 1)[0]
    return head or "/"


def ancestors(path: str) -> list[str]:
    """Every proper ancestor of path except the root, outermost first."""
    validate_path(path)
    parts = path[1:].split("/") if path != "/" else []
    return ["/" + "/".join(parts[:i]) for i in range(1, len(parts))]
