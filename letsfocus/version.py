"""
LetsFocus Version Information
Central version management for the LetsFocus project.
"""

from typing import Dict, Optional, Union

# Semantic Versioning: MAJOR.MINOR.PATCH
VERSION = "1.0.0"

VERSION_INFO: Dict[str, Union[int, Optional[str]]] = {
    "major": 1,
    "minor": 0,
    "patch": 0,
    "pre_release": None,  # e.g., "alpha", "beta", "rc1"
    "build": None
}

APP_NAME = "LetsFocus"
APP_DESCRIPTION = "Focus Session Timer with Cycling Background Music"


def get_version() -> str:
    """Get the current version string.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return VERSION


def get_full_version() -> str:
    """Get version with pre-release and build info if available."""
    version = VERSION
    if VERSION_INFO["pre_release"]:
        version += f"-{VERSION_INFO['pre_release']}"
    if VERSION_INFO["build"]:
        version += f"+{VERSION_INFO['build']}"
    return version


def get_app_info() -> str:
    """Get application name and version.

    Returns:
        str: Application name and version in format "AppName vX.Y.Z"
    """
    return f"{APP_NAME} v{get_version()}"


def get_version_dict() -> Dict[str, Union[str, int, Optional[str]]]:
    """Get version information as dictionary."""
    return {
        "version": VERSION,
        "full_version": get_full_version(),
        "app_name": APP_NAME,
        "description": APP_DESCRIPTION,
        **VERSION_INFO
    }
