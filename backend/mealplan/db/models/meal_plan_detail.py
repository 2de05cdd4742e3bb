from sqlalchemy import Column, Integer, String, ForeignKey
from mealplan.db.base import Base

class MealPlanDetail(Base):
    __tablename__ = "meal_plan_details"

    id = Column(Integer, primary_key=True)  # insertion order
    meal_plan_id = Column(Integer, ForeignKey("meal_plans.id"), nullable=False, index=True)
    meal_time = Column(String(16), nullable=False)  # breakfast, lunch, dinner, snack
    day_of_week = Column(String(3), nullable=False)  # Mon..Sun
    food_id = Column(Integer, ForeignKey("food_items.fid"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
