"""Test utilities for waypost applications.

::

    from waypost.testing import TestClient
"""

from waypost.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
