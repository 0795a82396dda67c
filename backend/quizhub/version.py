"""
Version management for the QuizHub backend.
Reads the version from the environment or the installed package metadata.
"""
import os
from importlib import metadata

DEFAULT_VERSION = "1.0.0"


def get_version() -> str:
    """Resolve the API version: APP_VERSION, then package metadata, then the default."""
    env_version = os.getenv("APP_VERSION")
    if env_version:
        return env_version

    try:
        return metadata.version("quizhub-backend")
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


APP_VERSION = get_version()
