"""
Sessionflow - Server-side Session State for Request/Response Services

Keeps per-user session data alive across independent request cycles.

Architecture:
- Each module is self-contained with clear interfaces
- Storage backends are completely replaceable
- The session core never touches HTTP plumbing directly
- All communication through defined interfaces

Modules:
- session: Session lifecycle, identifiers, flash and temp data
- handlers: Pluggable persistence backends (memory, file, redis)
- storage: Redis connection management
- middleware: Cookie transport and FastAPI integration
- api: REST API models
"""

__version__ = "1.0.0"
