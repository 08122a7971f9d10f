"""
Differential conformance testing of Filecoin JSON-RPC nodes.

Sends the same requests to a system under test and to a reference node and
reports, per method, whether both answered alike.
"""

__version__ = "0.1.0"
