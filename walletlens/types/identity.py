from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResolutionState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class IdentityRecord(BaseModel):
    """ENS name plus profile text records for one address."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, description="Primary ENS name")
    avatar: Optional[str] = Field(default=None, description="Avatar URI")
    description: Optional[str] = Field(default=None, description="Profile bio")
    email: Optional[str] = Field(default=None, description="Contact email")
    url: Optional[str] = Field(default=None, description="Website")
    twitter: Optional[str] = Field(default=None, description="Twitter / X handle")
    github: Optional[str] = Field(default=None, description="GitHub handle")
    discord: Optional[str] = Field(default=None, description="Discord handle")
    telegram: Optional[str] = Field(default=None, description="Telegram handle")
    content_hash: Optional[str] = Field(default=None, description="contenthash text record")
    state: ResolutionState = Field(default=ResolutionState.RESOLVED, description="Resolution state")
    error: Optional[str] = Field(default=None, description="Failure description when state is failed")

    @classmethod
    def pending(cls) -> "IdentityRecord":
        return cls(state=ResolutionState.PENDING)

    @classmethod
    def failed(cls, error: str) -> "IdentityRecord":
        return cls(state=ResolutionState.FAILED, error=error)

    @property
    def loading(self) -> bool:
        return self.state == ResolutionState.PENDING

    @property
    def has_profile_fields(self) -> bool:
        return any(
            (self.avatar, self.description, self.email, self.url,
             self.twitter, self.github, self.discord, self.telegram)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "avatar": self.avatar,
            "description": self.description,
            "email": self.email,
            "url": self.url,
            "twitter": self.twitter,
            "github": self.github,
            "discord": self.discord,
            "telegram": self.telegram,
            "contentHash": self.content_hash,
            "state": self.state.value,
            "loading": self.loading,
            "error": self.error,
        }
