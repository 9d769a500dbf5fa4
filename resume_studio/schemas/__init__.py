"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: database tables (SQLAlchemy)
- Schemas: API contract (what client sends/receives)
"""
