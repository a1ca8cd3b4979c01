"""
Version banner shared by the oauthtoy entrypoints.
"""

import os
import platform

__version__ = "0.0.0"


def get_version(me: str) -> str:
    """One-line banner logged at startup and printed by ``--version``."""
    return (
        f"{me} version={__version__} runtime=python{platform.python_version()} "
        f"platform={platform.system().lower()} arch={platform.machine()} cpus={os.cpu_count()}"
    )
