"""Test catalogues: static suites and tests derived from chain archives."""

from .snapshot import snapshot_tests
from .static import static_tests, websocket_tests

__all__ = ['snapshot_tests', 'static_tests', 'websocket_tests']
