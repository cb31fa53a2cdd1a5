"""
Core package for the chat service.

This package contains the main application logic and components including:
- Data classes for identities, catalog models, sessions and messages
- Services for token verification, model resolution, completion and persistence
- API routes and endpoints
"""
