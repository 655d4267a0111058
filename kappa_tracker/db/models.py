"""SQLAlchemy ORM models for users and teams.

Progress lives on the user row as JSON lists (camelCase entries),
the same shape the HTTP API exchanges.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


class UserModel(Base):
    """Tracked player and their persisted progress."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    faction: Mapped[str | None] = mapped_column(String, nullable=True)
    game_edition: Mapped[str | None] = mapped_column(String, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fence_rep: Mapped[float | None] = mapped_column(Float, nullable=True)

    # [{questId, status, completedAt?}]
    quests: Mapped[list] = mapped_column(JSON, default=list)
    # [{questId, objectiveId, collected}]
    objective_progress: Mapped[list] = mapped_column(JSON, default=list)
    # [{traderId, level}]
    trader_standings: Mapped[list] = mapped_column(JSON, default=list)
    # [{itemId, name, shortName?, iconLink?, wikiLink?, requiresFir, totalRequired, totalCollected}]
    hideout_items: Mapped[list] = mapped_column(JSON, default=list)
    # [{stationId, currentLevel}]
    station_levels: Mapped[list] = mapped_column(JSON, default=list)
    # [{stationId, levelId, itemId, collected}]
    hideout_progress: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    memberships: Mapped[list["TeamMemberModel"]] = relationship(
        "TeamMemberModel",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def progress_columns(self) -> dict:
        """Raw progress fields, keyed the way the progress loader expects."""
        return {
            "quests": self.quests,
            "objective_progress": self.objective_progress,
            "trader_standings": self.trader_standings,
            "station_levels": self.station_levels,
            "hideout_progress": self.hideout_progress,
            "level": self.level,
            "fence_rep": self.fence_rep,
            "game_edition": self.game_edition,
        }


class TeamModel(Base):
    """Team joined through an invite code."""

    __tablename__ = "teams"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    owner_user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id"), nullable=False
    )
    invite_code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    members: Mapped[list["TeamMemberModel"]] = relationship(
        "TeamMemberModel",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMemberModel.joined_at",
    )


class TeamMemberModel(Base):
    """Membership row (role is "owner" or "member")."""

    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    team_id: Mapped[str] = mapped_column(
        String, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String, nullable=False, default="member")
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    team: Mapped["TeamModel"] = relationship("TeamModel", back_populates="members")
    user: Mapped["UserModel"] = relationship("UserModel", back_populates="memberships")
