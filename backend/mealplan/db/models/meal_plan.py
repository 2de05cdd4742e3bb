from sqlalchemy import Column, Integer, Date, DateTime, Float
from mealplan.db.base import Base
import datetime as dt

class MealPlan(Base):
    __tablename__ = "meal_plans"

    # Plain INTEGER primary key: either recycled explicitly or assigned by the store
    id = Column(Integer, primary_key=True)
    date_range_start = Column(Date, nullable=False)
    date_range_end = Column(Date, nullable=False)
    people_count = Column(Integer, nullable=False, default=0)
    children_count = Column(Integer, nullable=False, default=0)
    total_cost = Column(Float, nullable=False, default=0.0)  # computed by the client, stored verbatim
    created_at = Column(DateTime, default=dt.datetime.utcnow)
    updated_at = Column(DateTime, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow)
