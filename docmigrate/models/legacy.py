"""
Legacy document shapes as they are stored in the source collections.

These models are the deserialization boundary: a raw document is decoded
into one of them before any transform runs. Nulls collapse to the field's
zero value, ObjectIds become hex strings, and fields whose type drifted
over time are tagged as Scalar or SequenceOf. A document whose field types
cannot be decoded raises pydantic's ValidationError.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from bson import ObjectId
from dateutil import parser as date_parser
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .fields import decode_variant


def _normalize(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _normalize(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Accept BSON datetimes as well as the string dates older documents carry.

    Results are naive UTC, the same as BSON datetimes decoded without tz_aware.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Unparseable timestamp {value!r}: {e}") from e
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class LegacyDocument(BaseModel):
    """Base for all legacy shapes."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        return _normalize(data)


class LegacyBot(LegacyDocument):
    """A bot listing from the old `bots` collection."""

    owner_id: str = Field("", alias="ownerID")
    owner_name: str = Field("", alias="ownerName")
    bot_id: str = Field("", alias="botID")
    alt_bot_id: str = Field("", alias="BotID")  # Older documents used this spelling
    username: str = ""
    discrim: str = ""
    avatar: str = ""
    prefix: str = ""
    invite: str = ""
    long_desc: str = Field("", alias="longDesc")
    short_desc: str = Field("", alias="shortDesc")
    tags: List[str] = Field(default_factory=list)
    uptimerate: int = 0
    coowners: List[str] = Field(default_factory=list)
    premium: str = ""
    status: str = ""
    website: str = ""
    github: str = ""
    support: str = ""
    certificate: str = ""
    votes: Any = None  # Scalar, SequenceOf or None
    token: str = ""

    @field_validator("votes", mode="before")
    @classmethod
    def _tag_votes(cls, value: Any) -> Any:
        return decode_variant(value)


class LegacyPost(LegacyDocument):
    """A post from the SocialFlux `posts` collection."""

    id: str = Field("", alias="_id")
    title: str = ""
    content: str = ""
    author: str = ""
    image_url: str = Field("", alias="imageUrl")
    image: str = ""
    hearts: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)


def _flag(name: str) -> Any:
    # Flags were written both camelCased and lowercased over time
    return Field(False, validation_alias=AliasChoices(name, name.lower()))


class LegacyUser(LegacyDocument):
    """A user from the SocialFlux `users` collection."""

    id: str = Field("", alias="_id")
    username: str = ""
    display_name: str = Field("", alias="displayname")
    user_id: int = Field(0, alias="userid")
    email: str = ""
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    profile_picture: str = Field("", alias="profilePicture")
    profile_banner: str = Field("", alias="profileBanner")
    bio: str = ""
    is_verified: bool = _flag("isVerified")
    is_organisation: bool = _flag("isOrganisation")
    is_developer: bool = _flag("isDeveloper")
    is_partner: bool = _flag("isPartner")
    is_owner: bool = _flag("isOwner")
    password: str = ""
    links: List[str] = Field(default_factory=list)

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)


class LegacyPartner(LegacyDocument):
    banner: str = ""
    logo: str = ""
    title: str = ""
    text: str = ""
    link: str = ""


class LegacyBlogEntry(LegacyDocument):
    body: str = ""


class LegacyBlog(LegacyDocument):
    """A blog post with its content split into blocks."""

    slug: str = ""
    title: str = ""
    date: str = ""
    author_name: str = Field("", alias="authorname")
    overview: str = ""
    author_avatar: str = Field("", alias="authoravatar")
    content: List[LegacyBlogEntry] = Field(default_factory=list)
