from typing import List, Optional
from enum import Enum
import datetime as dt
from pydantic import BaseModel, Field, field_validator, model_validator

class MealTime(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"

class DayOfWeek(str, Enum):
    mon = "Mon"
    tue = "Tue"
    wed = "Wed"
    thu = "Thu"
    fri = "Fri"
    sat = "Sat"
    sun = "Sun"

class MealAssignment(BaseModel):
    meal_time: MealTime = Field(alias="mealTime")
    day_of_week: DayOfWeek = Field(alias="dayOfWeek")
    food_id: int = Field(alias="foodId")
    quantity: int = Field(default=1, gt=0)

    model_config = {"populate_by_name": True}

class SaveMealPlanRequest(BaseModel):
    meal_plan_id: Optional[int] = Field(default=None, ge=0, alias="mealPlanId")
    date_range_start: dt.date = Field(alias="dateRangeStart")
    date_range_end: dt.date = Field(alias="dateRangeEnd")
    people_count: int = Field(default=0, ge=0, alias="peopleCount")
    children_count: int = Field(default=0, ge=0, alias="childrenCount")
    total_cost: float = Field(default=0.0, alias="totalCost")
    meals: List[MealAssignment] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("meal_plan_id")
    @classmethod
    def zero_means_new(cls, value):
        # Clients send 0 for a plan that has not been saved yet
        return value or None

    @model_validator(mode="after")
    def check_range(self):
        if self.date_range_end < self.date_range_start:
            raise ValueError("dateRangeEnd must not be before dateRangeStart")
        return self

    def header_fields(self) -> dict:
        """Column values for the meal_plans row."""
        return {
            "date_range_start": self.date_range_start,
            "date_range_end": self.date_range_end,
            "people_count": self.people_count,
            "children_count": self.children_count,
            "total_cost": self.total_cost,
        }

class SaveMealPlanResponse(BaseModel):
    success: bool = True
    message: str
    meal_plan_id: int = Field(alias="mealPlanId")

    model_config = {"populate_by_name": True}

class MealPlanDetailRead(BaseModel):
    meal_time: str = Field(alias="mealTime")
    day_of_week: str = Field(alias="dayOfWeek")
    food_id: int = Field(alias="foodId")
    quantity: int
    food_name: Optional[str] = Field(default=None, alias="foodName")
    # Only filled by get_plan
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")
    unit_calories: Optional[float] = Field(default=None, alias="unitCalories")
    total_price: Optional[float] = Field(default=None, alias="totalPrice")
    total_calories: Optional[float] = Field(default=None, alias="totalCalories")

    model_config = {"populate_by_name": True}

class MealPlanRead(BaseModel):
    id: int
    date_range_start: dt.date = Field(alias="dateRangeStart")
    date_range_end: dt.date = Field(alias="dateRangeEnd")
    people_count: int = Field(alias="peopleCount")
    children_count: int = Field(alias="childrenCount")
    total_cost: float = Field(alias="totalCost")
    details: List[MealPlanDetailRead] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

class MealPlanWithTotals(MealPlanRead):
    total_price: float = Field(default=0.0, alias="totalPrice")
    total_calories: float = Field(default=0.0, alias="totalCalories")

class MealPlanListResponse(BaseModel):
    meal_plans: List[MealPlanRead] = Field(default_factory=list, alias="mealPlans")

    model_config = {"populate_by_name": True}
