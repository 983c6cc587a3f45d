"""Domain models and entities.

- Pure data structures (Pydantic v2 / frozen dataclasses) describing resource
  kinds, their field descriptors and local/remote records.
- The domain knows nothing about HTTP, the CLI or logging.
"""
