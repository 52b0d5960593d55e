"""Test utilities for lighthouse applications.

Provides an in-process test client and response assertions::

    from lighthouse.testing import TestClient, assert_redirects_to
"""

from lighthouse.testing.assertions import assert_is_fragment, assert_is_page, assert_redirects_to
from lighthouse.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_is_fragment",
    "assert_is_page",
    "assert_redirects_to",
]
