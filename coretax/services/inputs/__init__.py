"""Validated inputs accepted by the services.

Routers bind request bodies straight to these models; they live beside the
services so that nothing below the API layer imports from it.
"""
