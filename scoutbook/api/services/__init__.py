"""API services for observation session management."""
