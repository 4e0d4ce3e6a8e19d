"""
Feature modules for Freelance Desk.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for external collaborators
- models.py: Pydantic models
- exceptions.py: Module-specific exceptions

Modules communicate through interfaces, not concrete implementations.
"""
