"""HTTP API"""

from .server import create_app, build_app, run

__all__ = ["create_app", "build_app", "run"]
