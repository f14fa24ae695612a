"""Infrastructure layer — map files on disk and the remote monster catalog.

This layer depends on stdlib and third-party libs (httpx, pydantic).
It may import domain types but never services, commands, or output.
"""
