"""Data classes for model catalog entries and resolved provider models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class CatalogModel:
    """A model catalog entry.

    Attributes:
        id: Internal identifier, the value clients send as ``modelId``
        name: Display name
        provider: Vendor label (e.g. "openai", "anthropic")
        provider_model_id: Routable model string understood by the provider
        description: Optional free text
        is_active: Whether the model is offered to new conversations
    """

    id: str
    name: str
    provider: str
    provider_model_id: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_json(self) -> Dict[str, Any]:
        """Convert the catalog entry to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "modelId": self.provider_model_id,
            "description": self.description,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class ResolvedModel:
    """Everything needed to route a completion to the provider.

    Attributes:
        model_id: Internal catalog id the client asked for
        provider_model_id: Provider-routable model string
        api_key: System-wide provider credential
    """

    model_id: str
    provider_model_id: str
    api_key: str

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        return (
            f"ResolvedModel(model_id={self.model_id!r}, "
            f"provider_model_id={self.provider_model_id!r})"
        )
