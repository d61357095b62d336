"""
Request-safety package.

Sanitization of inbound values, field normalizers, and the HTTP
middleware (sanitization, security headers, rate limiting) around routes.
"""
