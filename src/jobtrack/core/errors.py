from __future__ import annotations


class NotFoundError(LookupError):
    """A referenced record does not exist or belongs to another user."""

    def __init__(self, entity: str, entity_id: object | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class BoardValidationError(ValueError):
    """Input that passed schema validation but cannot be applied to the board."""
