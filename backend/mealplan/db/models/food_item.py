from sqlalchemy import Column, Integer, String, Text, Float
from mealplan.db.base import Base

class FoodItem(Base):
    __tablename__ = "food_items"

    fid = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    image = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)  # per serving
    calories = Column(Float, nullable=False, default=0.0)  # per serving
