"""
API Bridge: request-safety layer for the job-search backend.

Application package root. Business routes live in the consuming service;
this package provides the pipeline every request passes through.

Layers:
    - core: Settings.
    - interfaces: The bridge's own routers and schemas (health).
    - shared: Cross-cutting concerns (errors, sanitization, security, logging).
"""
