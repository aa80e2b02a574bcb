from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.session import Base


class User(Base):
    """Back-office account. Roles live in ``authorities``."""

    __tablename__ = "users"

    username = Column(String(50), primary_key=True)
    password_hash = Column(Text, nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)

    authorities = relationship(
        "Authority",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def roles(self) -> list:
        return sorted(a.authority for a in self.authorities)

    def add_authority(self, role: str) -> None:
        self.authorities.append(Authority(authority=role))


class Authority(Base):
    """One granted role (ROLE_ADMIN, ROLE_SECRETARY, ROLE_PROFESSOR) for a user."""

    __tablename__ = "authorities"
    __table_args__ = (
        UniqueConstraint("username", "authority", name="uq_authority_username_authority"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), ForeignKey("users.username", ondelete="CASCADE"), nullable=False)
    authority = Column(String(50), nullable=False)

    user = relationship("User", back_populates="authorities")
