"""Test utilities for switchboard services::

    from switchboard.testing import TestClient
"""

from switchboard.testing.client import TestClient

__all__ = ["TestClient"]
