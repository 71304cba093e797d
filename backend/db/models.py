from datetime import datetime
from sqlalchemy import (
    Column, Integer, Text, Float, ForeignKey, Index,
    DateTime,
)
from sqlalchemy.orm import relationship
from db.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(Text, unique=True, nullable=False)
    name = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    foods = relationship("Food", back_populates="user")
    workouts = relationship("Workout", back_populates="user")


class Food(Base):
    __tablename__ = "food"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    name = Column(Text, nullable=False)
    calories = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="foods")


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    title = Column(Text, nullable=False)
    duration = Column(Float, nullable=False, default=0)  # minutes
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="workouts")


# Indexes
Index("idx_food_user_date", Food.user_id, Food.date)
Index("idx_workouts_user_date", Workout.user_id, Workout.date)
