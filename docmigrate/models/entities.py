"""Canonical entities written to the destination stores."""

from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CanonicalRecord(BaseModel):
    """
    Fixed-shape output record.

    Every field is populated (defaults stand in for data the legacy
    documents never had) and instances are immutable once built.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    natural_key_field: ClassVar[str] = "id"

    @property
    def natural_key(self) -> str:
        return str(getattr(self, self.natural_key_field))

    def to_document(self) -> Dict[str, Any]:
        """Representation for document-store destinations."""
        return self.model_dump(by_alias=True)

    def to_row(self) -> Dict[str, Any]:
        """Column values for relational destinations."""
        return self.model_dump()

    def child_rows(self) -> Dict[str, List[Dict[str, Any]]]:
        """Rows for nested child tables, keyed by table name."""
        return {}


class Bot(CanonicalRecord):
    id: str
    name: str
    discriminator: str
    website: str = ""
    github: str = ""
    avatar: str = ""
    tags: Tuple[str, ...] = ()
    votes: int = 0
    reviews: Tuple[str, ...] = ()
    shortdesc: str = ""
    staff: str = ""
    prefix: str = ""
    longdesc: str = ""
    token: str = ""
    support: str = ""
    owner_avatar: str = Field("", alias="owneravatar")
    owner_name: str = Field("", alias="ownername")
    analytics: str = ""
    publicity: str = "public"
    featured: bool = False
    approved: bool = True
    reviewing: bool = False

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump(by_alias=True)
        document["tags"] = list(self.tags)
        document["reviews"] = list(self.reviews)
        return document


class Post(CanonicalRecord):
    id: str
    title: str = ""
    content: str = ""
    author: str = ""
    image_url: str = ""
    image: str = ""
    created_at: Optional[datetime] = None


class User(CanonicalRecord):
    natural_key_field: ClassVar[str] = "email"

    id: str
    email: str
    username: str = ""
    display_name: str = ""
    user_id: int = 0
    created_at: Optional[datetime] = None
    profile_picture: str = ""
    profile_banner: str = ""
    bio: str = ""
    is_verified: bool = False
    is_organisation: bool = False
    is_developer: bool = False
    is_partner: bool = False
    is_owner: bool = False
    password: str = ""


class Partner(CanonicalRecord):
    natural_key_field: ClassVar[str] = "title"

    title: str
    banner: str = ""
    logo: str = ""
    text: str = ""
    link: str = ""


class BlogEntry(CanonicalRecord):
    body: str = ""


class BlogPost(CanonicalRecord):
    natural_key_field: ClassVar[str] = "slug"

    slug: str
    title: str = ""
    date: str = ""
    author_name: str = ""
    overview: str = ""
    author_avatar: str = ""
    entries: Tuple[BlogEntry, ...] = ()

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"entries"})

    def child_rows(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "blog_entries": [
                {"blog_slug": self.slug, "body": entry.body} for entry in self.entries
            ],
        }
