"""Authentication module exports"""

from . import router, schemas, dependencies

__all__ = ["router", "schemas", "dependencies"]
