"""Test utilities for steeple controllers::

    from steeple.testing import TestClient
"""

from steeple.testing.client import TestClient

__all__ = ["TestClient"]
