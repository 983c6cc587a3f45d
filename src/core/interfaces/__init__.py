"""Core interfaces.

- Contracts (Protocol) implemented by concrete adapters.
- The engine depends on these abstractions, so tests can hand it stubs.
"""
