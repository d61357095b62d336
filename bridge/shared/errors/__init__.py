"""
Shared error handling package.

Holds the error taxonomy, the single error handler that turns any raised
value into an HTTP response, and the async boundary feeding it.
"""
