from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "feishu-md"


def get_version() -> str:
    env_version = os.getenv("FEISHU_MD_VERSION")
    if env_version:
        return env_version
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
