"""
Core utilities: domain exceptions and cross-cutting concerns shared by
collectors, analysis engine and API server.
"""
