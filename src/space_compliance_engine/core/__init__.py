"""Core domain model shared by every engine component."""
