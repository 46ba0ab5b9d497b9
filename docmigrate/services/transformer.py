"""Transformation engine for converting legacy documents into canonical records."""

import logging
from typing import Callable, Dict, Type

from pydantic import ValidationError

from ..exceptions import DecodeError, TransformError
from ..models.entities import (
    CanonicalRecord,
    Bot,
    Post,
    User,
    Partner,
    BlogPost,
    BlogEntry,
)
from ..models.fields import first_non_empty, resolve_variant
from ..models.legacy import (
    LegacyDocument,
    LegacyBot,
    LegacyPost,
    LegacyUser,
    LegacyPartner,
    LegacyBlog,
)
from ..models.record import SourceRecord

logger = logging.getLogger(__name__)

TransformFunc = Callable[[LegacyDocument, str], CanonicalRecord]


def require(entity: str, record_id: str, **fields: str) -> None:
    """
    Fail the record if any required field resolved to an empty value.

    Callers pass each field already resolved across its aliases.
    """
    missing = [name for name, value in fields.items() if not value]
    if missing:
        raise TransformError(
            record_id,
            f"Essential fields are empty for {entity} document {record_id}: {', '.join(missing)}",
        )


def transform_bot(doc: LegacyBot, record_id: str) -> Bot:
    """Map an old bot listing to the current bot layout."""
    bot_id = first_non_empty(doc.bot_id, doc.alt_bot_id)
    require("bot", record_id, id=bot_id, username=doc.username, discrim=doc.discrim)

    return Bot(
        id=bot_id,
        name=doc.username,
        discriminator=doc.discrim,
        website=doc.website,
        github=doc.github,
        avatar=doc.avatar,
        tags=tuple(doc.tags),
        votes=resolve_variant(doc.votes, int, 0),
        reviews=(),
        shortdesc=doc.short_desc,
        prefix=doc.prefix,
        longdesc=doc.long_desc,
        support=doc.support,
        owner_avatar="",  # Not tracked by the old listing
        owner_name=doc.owner_name,
        token="",
        analytics="",
        staff="",
        publicity="public",
        approved=True,
        reviewing=False,
        featured=False,
    )


def transform_post(doc: LegacyPost, record_id: str) -> Post:
    require("post", record_id, id=doc.id)

    return Post(
        id=doc.id,
        title=doc.title,
        content=doc.content,
        author=doc.author,
        image_url=doc.image_url,
        image=doc.image,
        created_at=doc.created_at,
    )


def transform_user(doc: LegacyUser, record_id: str) -> User:
    require("user", record_id, id=doc.id, email=doc.email)

    return User(
        id=doc.id,
        username=doc.username,
        display_name=doc.display_name,
        user_id=doc.user_id,
        email=doc.email,
        created_at=doc.created_at,
        profile_picture=doc.profile_picture,
        profile_banner=doc.profile_banner,
        bio=doc.bio,
        is_verified=doc.is_verified,
        is_organisation=doc.is_organisation,
        is_developer=doc.is_developer,
        is_partner=doc.is_partner,
        is_owner=doc.is_owner,
        password=doc.password,
    )


def transform_partner(doc: LegacyPartner, record_id: str) -> Partner:
    require("partner", record_id, title=doc.title)

    return Partner(
        banner=doc.banner,
        logo=doc.logo,
        title=doc.title,
        text=doc.text,
        link=doc.link,
    )


def transform_blog(doc: LegacyBlog, record_id: str) -> BlogPost:
    require("blog", record_id, slug=doc.slug)

    return BlogPost(
        slug=doc.slug,
        title=doc.title,
        date=doc.date,
        author_name=doc.author_name,
        overview=doc.overview,
        author_avatar=doc.author_avatar,
        entries=tuple(BlogEntry(body=entry.body) for entry in doc.content),
    )


class TransformEngine:
    """
    Engine for transforming source records to their canonical shape.

    Each entity has a legacy model (the decode step) and a transform
    function (the mapping step). Both are pure: the engine holds no
    per-record state and is safe to share between worker threads.
    """

    def __init__(self):
        """Initialize the transform engine."""
        self._legacy_models: Dict[str, Type[LegacyDocument]] = {}
        self._transforms: Dict[str, TransformFunc] = {}
        self._register_builtin_transforms()

    def _register_builtin_transforms(self) -> None:
        """Register the transforms for all built-in entities."""
        self.register_transform("bots", LegacyBot, transform_bot)
        self.register_transform("posts", LegacyPost, transform_post)
        self.register_transform("users", LegacyUser, transform_user)
        self.register_transform("partners", LegacyPartner, transform_partner)
        self.register_transform("blogs", LegacyBlog, transform_blog)

    def register_transform(
        self,
        entity: str,
        legacy_model: Type[LegacyDocument],
        func: TransformFunc
    ) -> None:
        """Register (or replace) the decode model and transform for an entity."""
        self._legacy_models[entity] = legacy_model
        self._transforms[entity] = func

    def decode(self, record: SourceRecord) -> LegacyDocument:
        """
        Decode a source record into its legacy model.

        Raises:
            DecodeError: the payload was unreadable or its field types are wrong
        """
        if not record.is_decoded:
            raise DecodeError(record.id, f"Could not decode document {record.id}: {record.decode_error}")

        model = self._legacy_models.get(record.source_entity)
        if model is None:
            raise TransformError(record.id, f"No transform registered for entity: {record.source_entity}")

        try:
            return model.model_validate(record.data)
        except ValidationError as e:
            raise DecodeError(
                record.id,
                f"Could not decode {record.source_entity} document {record.id}: "
                f"{e.error_count()} invalid field(s): {e.errors()[0]['loc']}",
            ) from e

    def transform_record(self, record: SourceRecord) -> CanonicalRecord:
        """
        Transform a source record to its canonical shape.

        Args:
            record: Record pulled from the source

        Returns:
            Fully populated canonical record

        Raises:
            DecodeError: the record could not be decoded
            TransformError: the record failed validation
        """
        legacy = self.decode(record)
        func = self._transforms[record.source_entity]

        try:
            return func(legacy, record.id)
        except TransformError:
            raise
        except (ValueError, TypeError) as e:
            raise TransformError(record.id, f"Transform error for {record.source_entity} {record.id}: {e}") from e
