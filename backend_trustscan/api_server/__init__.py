"""
API server package: HTTP/REST interface.

Exposes URL trust analysis and scan history to clients and delegates to the
analysis service, which owns validation, caching and the verdict engine.
"""
