from sqlalchemy import (
    Column, Integer, String, DateTime, CheckConstraint, Index
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class Team(Base):
    __tablename__ = 'teams'

    id = Column(Integer, primary_key=True)
    team_name = Column(String(100), nullable=False)
    qualifying_zone = Column(String(100), nullable=False)
    wins = Column(Integer, nullable=False, default=0)
    image_name = Column(String(100), nullable=True)

    # Metadata
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('wins >= 0', name='ck_teams_wins_non_negative'),
        Index('idx_teams_zone_wins', 'qualifying_zone', 'wins'),
    )

    def __repr__(self):
        return f"<Team(id={self.id}, name='{self.team_name}', zone='{self.qualifying_zone}', wins={self.wins})>"
