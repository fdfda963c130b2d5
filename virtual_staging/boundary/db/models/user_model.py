"""
User ORM model.

Identity anchor created on first external sign-in. Owns one credit account,
any number of staging sessions and jobs.

Dependencies: sqlalchemy, virtual_staging.boundary.db.base
System role: User persistence
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from virtual_staging.boundary.db.base import Base, UUIDMixin, TimestampMixin


class UserModel(Base, UUIDMixin, TimestampMixin):
    """
    User ORM model keyed by the external identity provider's id.

    Attributes:
        id: Internal UUID used by every other table
        external_id: Identity provider subject (unique)
        email: Primary email address
        first_name: Optional given name
        last_name: Optional family name
        image_url: Optional avatar URL
        credit_account: One-to-one CreditAccountModel
    """

    __tablename__ = "users"

    external_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="External identity provider subject",
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")

    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    credit_account = relationship(
        "CreditAccountModel",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
