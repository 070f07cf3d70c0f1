"""
HTTP layer

Two capability-scoped surfaces:
- /api/dev/...             developer routes, owner-scoped
- /api/admin/reviews/...   admin review routes
"""
