"""Core: configuration, errors, session tokens and access control."""
