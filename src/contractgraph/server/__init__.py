"""contractgraph.server - Flask REST API server.

A thin REST wrapper over ContractService.
"""

from contractgraph.server.app import create_app

__all__ = ["create_app"]
