"""
HTTP API: routers, shared dependencies and error mapping.
"""
