import dotenv
dotenv.load_dotenv()

from mealplan.db.session import engine
from mealplan.db.base import Base

# Import all models so they are registered with Base
from mealplan.db.models import food_item, meal_plan, meal_plan_detail

metadata = [
    food_item.FoodItem.__table__,
    meal_plan.MealPlan.__table__,
    meal_plan_detail.MealPlanDetail.__table__,
]

if __name__ == "__main__":
    Base.metadata.create_all(bind=engine, tables=metadata)
    print("✅ Meal plan tables created!")
