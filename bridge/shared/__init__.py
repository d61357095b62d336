"""
Shared module package.

Contains the cross-cutting request-safety pipeline:
- Error taxonomy, handling and async boundary
- Input sanitization and security middleware
- Rate limiting
- Logging configuration
"""
