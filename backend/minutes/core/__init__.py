# minutes/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Application initialization and default admin creation
- db: Database configuration and connection management
- logging: Log setup and structured event helpers
- rate_limit: Fixed-window rate limiter capability (memory / Redis)
- security: Password hashing, JWT tokens and encryption of stored secrets
"""
