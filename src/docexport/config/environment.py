"""
Environment Variable Handling.

Loads a ``.env`` file into ``os.environ`` with python-dotenv so that
``${VAR}`` references and ``DOCEXPORT_*`` overrides in the configuration
can be supplied per checkout.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Track whether dotenv has been loaded
_dotenv_loaded: bool = False


def ensure_dotenv_loaded(env_file: str = ".env") -> bool:
    """Ensure .env file is loaded into os.environ.

    Existing environment variables win over values from the file.

    Args:
        env_file: Path to .env file (relative or absolute)

    Returns:
        True if a .env file was found and loaded, False otherwise
    """
    global _dotenv_loaded

    if _dotenv_loaded:
        return True

    env_paths = [
        Path(env_file),  # Relative to cwd or absolute
        Path.cwd() / env_file,
    ]

    _dotenv_loaded = True
    for env_path in env_paths:
        if env_path.is_file():
            load_dotenv(env_path, override=False)
            return True

    # No .env file found, that's okay - use defaults
    return False


def load_environment(env_file: str = ".env") -> dict[str, str]:
    """Load the .env file and return the ``DOCEXPORT_*`` variables.

    Args:
        env_file: Path to .env file

    Returns:
        Mapping of DOCEXPORT_* variable names to values
    """
    ensure_dotenv_loaded(env_file)
    return {key: value for key, value in os.environ.items() if key.startswith("DOCEXPORT_")}


def reset_environment() -> None:
    """Forget that the .env file was loaded (mainly for testing)."""
    global _dotenv_loaded
    _dotenv_loaded = False
