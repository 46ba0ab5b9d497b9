"""Relational destination tables for the SocialFlux migration.

Creating these tables is a one-time setup step that happens before any
migration runs; the loaders only ever insert into them.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

posts = Table(
    "posts",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("title", String(255), nullable=False, default=""),
    Column("content", Text, nullable=False),
    Column("author", String(64), nullable=False, default=""),
    Column("image_url", String(512), nullable=False, default=""),
    Column("image", String(512), nullable=False, default=""),
    Column("created_at", DateTime, nullable=True),
)

users = Table(
    "users",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("username", String(64), nullable=False, default=""),
    Column("display_name", String(128), nullable=False, default=""),
    Column("user_id", Integer, nullable=False, default=0),
    Column("email", String(255), nullable=False, unique=True),
    Column("created_at", DateTime, nullable=True),
    Column("profile_picture", String(512), nullable=False, default=""),
    Column("profile_banner", String(512), nullable=False, default=""),
    Column("bio", Text, nullable=False),
    Column("is_verified", Boolean, nullable=False, default=False),
    Column("is_organisation", Boolean, nullable=False, default=False),
    Column("is_developer", Boolean, nullable=False, default=False),
    Column("is_partner", Boolean, nullable=False, default=False),
    Column("is_owner", Boolean, nullable=False, default=False),
    Column("password", String(255), nullable=False, default=""),
)

partners = Table(
    "partners",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("banner", String(512), nullable=False, default=""),
    Column("logo", String(512), nullable=False, default=""),
    Column("title", String(255), nullable=False, unique=True),
    Column("text", Text, nullable=False),
    Column("link", String(512), nullable=False, default=""),
)

blogs = Table(
    "blogs",
    metadata,
    Column("slug", String(255), primary_key=True),
    Column("title", String(255), nullable=False, default=""),
    Column("date", String(64), nullable=False, default=""),
    Column("author_name", String(128), nullable=False, default=""),
    Column("overview", Text, nullable=False),
    Column("author_avatar", String(512), nullable=False, default=""),
)

blog_entries = Table(
    "blog_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("blog_slug", String(255), ForeignKey("blogs.slug"), nullable=False),
    Column("body", Text, nullable=False),
)
