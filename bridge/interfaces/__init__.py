"""
Interfaces layer package.

Contains FastAPI routers and Pydantic response schemas served by the
bridge itself. Business routes are mounted by the consuming service.
"""
