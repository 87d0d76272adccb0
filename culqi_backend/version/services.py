import json

from culqi_backend.utils import root_path

from .models import VersionInfo


def read_version_info(path: str = "version.json") -> VersionInfo:
    try:
        with open(root_path(path), "r") as version_file:
            data = json.load(version_file)
    except FileNotFoundError:
        return VersionInfo(version="v0.0.0", git_ref="unknown")

    return VersionInfo(
        version=data.get("version", "v0.0.0"),
        git_ref=data.get("git_ref", "unknown"),
    )
