"""User data model."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """User record stored in the ``users`` table.

    Attributes:
        user_id: Store-assigned identifier; 0 until the first successful add.
        login: Display name; None when unset.
    """

    user_id: int = Field(default=0, ge=0)
    login: Optional[str] = Field(default=None, max_length=255)

    model_config = {
        "validate_assignment": True,
    }

    @property
    def is_persisted(self) -> bool:
        """True once the store has assigned an identifier."""
        return self.user_id > 0

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> "User":
        """Build a `User` from a row with ``id`` and ``login`` columns."""
        login = row.get("login")
        return cls(
            user_id=int(str(row["id"])),
            login=str(login) if login is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain dict representation via Pydantic's `model_dump()`."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        """Create a `User` from a dict while rejecting unexpected fields."""
        allowed = set(cls.model_fields.keys())
        extra = set(d.keys()) - allowed
        if extra:
            raise ValueError(f"Extra fields not permitted: {extra}")
        return cls(**d)
