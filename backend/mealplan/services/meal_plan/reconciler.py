import logging
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple, Type
import datetime as dt

from sqlalchemy import delete, exists, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from mealplan.db.models.meal_plan import MealPlan
from mealplan.db.models.meal_plan_detail import MealPlanDetail
from mealplan.services.catalog import FoodCatalog
from mealplan.services.meal_plan.exceptions import (
    PlanNotFound,
    PlanStorageError,
    IdAllocationError,
    HeaderWriteError,
    DetailDeleteError,
    DetailInsertError,
    HeaderDeleteError,
    PlanReadError,
    CommitError,
)
from mealplan.services.meal_plan.schema import (
    SaveMealPlanRequest,
    MealAssignment,
    MealPlanRead,
    MealPlanDetailRead,
    MealPlanWithTotals,
)

logger = logging.getLogger(__name__)


def _has_details(plan_id_column):
    return exists().where(MealPlanDetail.meal_plan_id == plan_id_column)


class PlanReconciler:
    """Mediates every write to the meal plan header and detail tables.

    Each public write runs as a single transaction on ``db``: the header
    write (or id allocation), the detail delete and the detail insert either
    all commit or all roll back.
    """

    def __init__(self, db: Session, catalog: Optional[FoodCatalog] = None):
        self.db = db
        self.catalog = catalog or FoodCatalog(db)

    @contextmanager
    def _step(self, error_cls: Type[PlanStorageError], plan_id: Optional[int] = None):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Meal plan %s: %s failed, transaction rolled back: %s", plan_id, error_cls.step, e)
            raise error_cls(plan_id=plan_id, cause=e) from e

    # ---- writes ----

    def save(self, request: SaveMealPlanRequest) -> int:
        """Create or fully replace a plan; returns the effective plan id."""
        if request.meal_plan_id is not None:
            plan_id = self._update_header(request)
            self._delete_details(plan_id)
        else:
            plan_id = self._create_header(request)
        self._insert_details(plan_id, request.meals)
        with self._step(CommitError, plan_id):
            self.db.commit()
        return plan_id

    def delete(self, plan_id: int) -> None:
        self._delete_details(plan_id)
        with self._step(HeaderDeleteError, plan_id):
            result = self.db.execute(delete(MealPlan).where(MealPlan.id == plan_id))
        if result.rowcount == 0:
            self.db.rollback()
            raise PlanNotFound(plan_id)
        with self._step(CommitError, plan_id):
            self.db.commit()
        logger.info("Deleted meal plan %s", plan_id)

    def _update_header(self, request: SaveMealPlanRequest) -> int:
        plan_id = request.meal_plan_id
        with self._step(HeaderWriteError, plan_id):
            # Row lock serialises concurrent replaces of the same plan
            plan = self.db.get(MealPlan, plan_id, with_for_update=True, populate_existing=True)
            if plan is None:
                self.db.rollback()
                raise PlanNotFound(plan_id)
            for key, value in request.header_fields().items():
                setattr(plan, key, value)
            self.db.flush()
        return plan_id

    def _create_header(self, request: SaveMealPlanRequest) -> int:
        with self._step(IdAllocationError):
            candidates = self.recyclable_ids()
        for candidate_id, is_ghost in candidates:
            if self._claim(candidate_id, is_ghost, request):
                logger.info("Recycled meal plan id %s", candidate_id)
                return candidate_id
        with self._step(HeaderWriteError):
            plan = MealPlan(**request.header_fields())
            self.db.add(plan)
            self.db.flush()
        logger.info("Store assigned meal plan id %s", plan.id)
        return plan.id

    def recyclable_ids(self) -> List[Tuple[int, bool]]:
        """Ids a new plan may take, smallest first, as ``(id, is_ghost)``.

        Ghosts are headers with no detail rows. Gaps are ids below the
        current maximum with no header at all; only the first id of each
        gap run is listed.
        """
        ghosts = self.db.execute(
            select(MealPlan.id).where(~_has_details(MealPlan.id)).order_by(MealPlan.id)
        ).scalars().all()

        low, high = self.db.execute(select(func.min(MealPlan.id), func.max(MealPlan.id))).one()
        gaps = []
        if high is not None:
            if low > 1:
                gaps.append(1)
            following = aliased(MealPlan)
            gaps.extend(self.db.execute(
                select(MealPlan.id + 1)
                .where(~exists().where(following.id == MealPlan.id + 1))
                .where(MealPlan.id + 1 < high)
            ).scalars().all())

        return sorted([(i, True) for i in ghosts] + [(i, False) for i in gaps])

    def _claim(self, plan_id: int, is_ghost: bool, request: SaveMealPlanRequest) -> bool:
        """Take ``plan_id`` for a new header inside a savepoint.

        Returns False when another writer got there first: the ghost gained
        details or disappeared, or the gap id now violates the primary key.
        """
        with self._step(HeaderWriteError, plan_id):
            try:
                with self.db.begin_nested():
                    if is_ghost:
                        # Detail check must run after the lock so it sees writers that committed meanwhile
                        claimed = self._lock_header(plan_id) and not self.db.scalar(
                            select(_has_details(plan_id))
                        )
                        if claimed:
                            now = dt.datetime.utcnow()
                            self.db.execute(
                                update(MealPlan)
                                .where(MealPlan.id == plan_id)
                                .values(created_at=now, updated_at=now, **request.header_fields())
                                .execution_options(synchronize_session=False)
                            )
                    else:
                        self.db.execute(insert(MealPlan).values(id=plan_id, **request.header_fields()))
                        claimed = True
            except IntegrityError:
                claimed = False
        if not claimed:
            logger.info("Meal plan id %s taken concurrently, trying next candidate", plan_id)
        return claimed

    def _lock_header(self, plan_id: int) -> bool:
        """Row-lock a header; False if it no longer exists."""
        locked = self.db.execute(
            select(MealPlan.id).where(MealPlan.id == plan_id).with_for_update()
        ).scalar_one_or_none()
        return locked is not None

    def _delete_details(self, plan_id: int) -> None:
        with self._step(DetailDeleteError, plan_id):
            self.db.execute(delete(MealPlanDetail).where(MealPlanDetail.meal_plan_id == plan_id))

    def _insert_details(self, plan_id: int, meals: List[MealAssignment]) -> None:
        if not meals:
            return
        rows = [
            {
                "meal_plan_id": plan_id,
                "meal_time": meal.meal_time.value,
                "day_of_week": meal.day_of_week.value,
                "food_id": meal.food_id,
                "quantity": meal.quantity,
            }
            for meal in meals
        ]
        with self._step(DetailInsertError, plan_id):
            self.db.execute(insert(MealPlanDetail), rows)

    # ---- reads ----

    def _details_for(self, plan_ids: List[int]) -> Dict[int, List[MealPlanDetail]]:
        grouped: Dict[int, List[MealPlanDetail]] = defaultdict(list)
        if not plan_ids:
            return grouped
        rows = self.db.execute(
            select(MealPlanDetail)
            .where(MealPlanDetail.meal_plan_id.in_(plan_ids))
            .order_by(MealPlanDetail.id)
            .execution_options(populate_existing=True)
        ).scalars()
        for row in rows:
            grouped[row.meal_plan_id].append(row)
        return grouped

    def _header(self, plan: MealPlan) -> dict:
        return {
            "id": plan.id,
            "date_range_start": plan.date_range_start,
            "date_range_end": plan.date_range_end,
            "people_count": plan.people_count,
            "children_count": plan.children_count,
            "total_cost": plan.total_cost,
        }

    def list_plans(self) -> List[MealPlanRead]:
        with self._step(PlanReadError):
            plans = self.db.execute(
                select(MealPlan).order_by(MealPlan.id.desc()).execution_options(populate_existing=True)
            ).scalars().all()
            details = self._details_for([p.id for p in plans])
            self.catalog.preload(d.food_id for rows in details.values() for d in rows)

        return [
            MealPlanRead(
                details=[
                    MealPlanDetailRead(
                        meal_time=d.meal_time,
                        day_of_week=d.day_of_week,
                        food_id=d.food_id,
                        quantity=d.quantity,
                        food_name=self.catalog.resolve_food_name(d.food_id),
                    )
                    for d in details.get(plan.id, [])
                ],
                **self._header(plan),
            )
            for plan in plans
        ]

    def get_plan(self, plan_id: int) -> MealPlanWithTotals:
        with self._step(PlanReadError, plan_id):
            plan = self.db.get(MealPlan, plan_id, populate_existing=True)
            if plan is None:
                raise PlanNotFound(plan_id)
            rows = self._details_for([plan_id]).get(plan_id, [])
            self.catalog.preload(d.food_id for d in rows)

        details = []
        total_price = 0.0
        total_calories = 0.0
        for d in rows:
            unit_price = self.catalog.resolve_food_unit_price(d.food_id)
            unit_calories = self.catalog.resolve_food_calories(d.food_id)
            row_price = unit_price * d.quantity
            row_calories = unit_calories * d.quantity
            total_price += row_price
            total_calories += row_calories
            details.append(MealPlanDetailRead(
                meal_time=d.meal_time,
                day_of_week=d.day_of_week,
                food_id=d.food_id,
                quantity=d.quantity,
                food_name=self.catalog.resolve_food_name(d.food_id),
                unit_price=unit_price,
                unit_calories=unit_calories,
                total_price=row_price,
                total_calories=row_calories,
            ))

        return MealPlanWithTotals(
            details=details,
            total_price=total_price,
            total_calories=total_calories,
            **self._header(plan),
        )
