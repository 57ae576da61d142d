"""
Repository coordinates and argument validation.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from github_updater.plugin_system.exceptions import ValidationError


def require_string(value: Any, field: str) -> str:
    """Raise ValidationError unless value is a string."""
    if not isinstance(value, str):
        raise ValidationError(
            f"Type Error: Expected {field} to be a string, {type(value).__name__} given."
        )
    return value


def split_owner(owner: str) -> Tuple[str, Optional[str]]:
    """
    Split an "owner/name" string.

    Returns:
        Tuple of (owner, name); name is None when no slash is present
    """
    if '/' not in owner:
        return owner, None
    owner, name = owner.split('/')[:2]
    return owner, (name or None)


@dataclass(frozen=True)
class RepositoryRef:
    """A GitHub repository coordinate."""

    owner: str
    name: str

    def __post_init__(self):
        require_string(self.owner, 'owner')
        require_string(self.name, 'name')
        if not self.owner or not self.name:
            raise ValidationError("Repository owner and name must not be empty.")

    @classmethod
    def parse(cls, owner: str, name: Optional[str] = None) -> 'RepositoryRef':
        """Build a ref from separate parts or a combined "owner/name" string."""
        require_string(owner, 'owner')
        owner, embedded = split_owner(owner)
        if embedded:
            name = embedded
        if name is None:
            raise ValidationError(f"No repository name given for owner {owner!r}.")
        return cls(owner, name)

    @property
    def key(self) -> str:
        """Option-store key of this repository."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.key
