from typing import Optional


class MealPlanError(Exception):
    pass


class PlanNotFound(MealPlanError):
    def __init__(self, plan_id: int):
        super().__init__(f"Meal plan {plan_id} not found")
        self.plan_id = plan_id


class PlanStorageError(MealPlanError):
    """A database step of a plan operation failed.

    ``step`` names the statement group that failed so callers can tell a
    header problem from a detail problem. ``partial`` is True only when some
    earlier part of the operation may already be committed.
    """

    step = "storage"

    def __init__(self, plan_id: Optional[int] = None, partial: bool = False, cause: Optional[Exception] = None):
        detail = f"{self.step} failed"
        if plan_id is not None:
            detail += f" for meal plan {plan_id}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)
        self.plan_id = plan_id
        self.partial = partial


class IdAllocationError(PlanStorageError):
    step = "id-allocation"


class HeaderWriteError(PlanStorageError):
    step = "header-write"


class DetailDeleteError(PlanStorageError):
    step = "detail-delete"


class DetailInsertError(PlanStorageError):
    step = "detail-insert"


class HeaderDeleteError(PlanStorageError):
    step = "header-delete"


class PlanReadError(PlanStorageError):
    step = "read"


class CommitError(PlanStorageError):
    step = "commit"
