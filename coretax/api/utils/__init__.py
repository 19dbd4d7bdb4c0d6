"""Utility modules for the API layer.

- **responses**: orjson response class used as the application default
- **pagination**: query parameter parsing shared by list endpoints
"""
