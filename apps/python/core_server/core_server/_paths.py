from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=1)
def ensure_local_packages_importable() -> None:
    """
    Put every ``packages/python/<name>`` directory on sys.path when running directly.

    Each local distribution keeps its import package one level down
    (``packages/python/kollabs_repo/kollabs_repo``), so the distribution
    directories themselves are what needs to be importable. Installed
    deployments (``pip install -e .``) never depend on this.
    """

    current = Path(__file__).resolve()
    for ancestor in current.parents:
        packages_dir = ancestor / "packages" / "python"
        if packages_dir.exists():
            for distribution in sorted(packages_dir.iterdir()):
                path = str(distribution)
                if distribution.is_dir() and path not in sys.path:
                    sys.path.insert(0, path)
            return
