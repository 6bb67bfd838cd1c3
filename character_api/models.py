"""ORM models (SQLAlchemy 2.0).

The `characters` table stores a Character flattened: origin and location are
split into name/url column pairs and the episode list is kept as JSON text.
See `mapper` for the translation to and from the nested document.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, Text
from .db import Base


class CharacterRow(Base):
    """One stored character (fourteen columns).

    Columns:
        id: Autoincrement primary key, assigned by the database on insert.
        name, status, species, type, gender: Free-form descriptive strings.
        origin_name, origin_url: Flattened origin location.
        location_name, location_url: Flattened current location.
        image: Avatar URL.
        episode_urls: JSON array of episode URLs, stored as text.
        url: Resource URL.
        created: Creation timestamp string, stored as supplied.
    """

    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(Text, nullable=False, default="")
    species: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(Text, nullable=False, default="")
    gender: Mapped[str] = mapped_column(Text, nullable=False, default="")
    origin_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    origin_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    episode_urls: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created: Mapped[str] = mapped_column(Text, nullable=False, default="")


# Column order of a stored row; matches the public document's field order.
ROW_COLUMNS = (
    "id",
    "name",
    "status",
    "species",
    "type",
    "gender",
    "origin_name",
    "origin_url",
    "location_name",
    "location_url",
    "image",
    "episode_urls",
    "url",
    "created",
)
