from pathlib import Path


def get_project_root() -> Path:
    """Get the project root directory.

    Walks up from the working directory, then from the module location,
    to find the project root, identified by the presence of pyproject.toml.

    Returns:
        Path to the project root directory
    """
    for start in (Path.cwd(), Path(__file__).resolve()):
        for parent in [start, *start.parents]:
            if (parent / "pyproject.toml").exists():
                return parent

    # Fallback to two levels up (wpstack/utils/paths.py -> project root)
    return Path(__file__).parent.parent.parent


def resolve_under(root: Path, value: str | Path) -> Path:
    """Resolve ``value`` relative to ``root`` unless it is already absolute."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (root / path).resolve()
    return path
