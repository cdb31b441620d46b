"""CivicTrack: civic issue tracking API with JWT auth, RBAC and an admin audit trail."""

__version__ = "0.1.0"
