"""Test utilities for perch applications.

    from perch.testing import TestClient
"""

from perch.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
