"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialised with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(str, Enum):
    """Legal domain classification."""

    civil = "Civil Law"
    criminal = "Criminal Law"
    commercial = "Commercial Law"
    family = "Family Law"
    administrative = "Administrative Law"
    constitutional = "Constitutional Law"
    labor = "Labor Law"
    tax = "Tax Law"
    real_estate = "Real Estate Law"
    intellectual_property = "Intellectual Property"
    general = "General Inquiry"


class DocumentType(str, Enum):
    """Kind of legal instrument."""

    constitution = "constitution"
    civil_code = "civil_code"
    criminal_code = "criminal_code"
    commercial_code = "commercial_code"
    labor_law = "labor_law"
    tax_law = "tax_law"
    administrative_law = "administrative_law"
    family_law = "family_law"
    real_estate_law = "real_estate_law"
    intellectual_property_law = "intellectual_property_law"
    regulation = "regulation"
    decree = "decree"
    other = "other"


class SessionStatus(str, Enum):
    """Chat session lifecycle state."""

    active = "active"
    completed = "completed"
    archived = "archived"
    deleted = "deleted"


TERMINAL_STATUSES = frozenset(
    {SessionStatus.completed, SessionStatus.archived, SessionStatus.deleted}
)


class MessageRole(str, Enum):
    """Author of a chat message."""

    user = "user"
    assistant = "assistant"


class SynthesisSource(str, Enum):
    """Where an assistant answer came from."""

    llm = "llm"
    fallback = "fallback"


class FeedbackTag(str, Enum):
    """Feedback categories a user can attach to a rating."""

    helpful = "helpful"
    accurate = "accurate"
    fast = "fast"
    comprehensive = "comprehensive"
    easy_to_understand = "easy_to_understand"
