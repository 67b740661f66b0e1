"""
contractgraph.utilities - Shared helpers
"""
