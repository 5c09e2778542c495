"""Path management utilities for contract-deployer library."""

from pathlib import Path
from typing import Optional, Union


def get_project_root() -> Path:
    """
    Get default project root (current working directory).

    Returns:
        Path to the directory the deployer was started from
    """
    return Path.cwd()


def get_project_paths(project_root: Optional[Union[Path, str]] = None) -> tuple[Path, Path, Path]:
    """
    Get project file paths.

    Args:
        project_root: Custom project directory (defaults to the current directory)

    Returns:
        Tuple of (config_path, artifacts_dir, dotenv_path)
    """
    if project_root is None:
        project_root = get_project_root()
    else:
        project_root = Path(project_root).absolute()

    config_path = project_root / "deployer.json"
    artifacts_dir = project_root / "artifacts"
    dotenv_path = project_root / ".env"

    return (config_path, artifacts_dir, dotenv_path)
