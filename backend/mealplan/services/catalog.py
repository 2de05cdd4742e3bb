from typing import Dict, Iterable, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from mealplan.db.models.food_item import FoodItem

class FoodCatalog:
    """Read-only view of the food catalog used while assembling plans.

    Call ``preload`` with every food id a read needs so the whole lookup is
    one query; unknown ids resolve to no name and zero price/calories.
    """

    def __init__(self, db: Session):
        self.db = db
        self._foods: Dict[int, Optional[FoodItem]] = {}

    def preload(self, food_ids: Iterable[int]) -> None:
        missing = {fid for fid in food_ids if fid not in self._foods}
        if not missing:
            return
        self._foods.update(dict.fromkeys(missing))
        rows = self.db.execute(select(FoodItem).where(FoodItem.fid.in_(missing))).scalars()
        for food in rows:
            self._foods[food.fid] = food

    def _get(self, food_id: int) -> Optional[FoodItem]:
        if food_id not in self._foods:
            self.preload([food_id])
        return self._foods.get(food_id)

    def resolve_food_name(self, food_id: int) -> Optional[str]:
        food = self._get(food_id)
        return food.name if food else None

    def resolve_food_unit_price(self, food_id: int) -> float:
        food = self._get(food_id)
        return float(food.price or 0.0) if food else 0.0

    def resolve_food_calories(self, food_id: int) -> float:
        food = self._get(food_id)
        return float(food.calories or 0.0) if food else 0.0
