from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from mealplan.deps import get_db
from mealplan.services.meal_plan.reconciler import PlanReconciler
from mealplan.services.meal_plan.exceptions import PlanNotFound, PlanStorageError
from mealplan.services.meal_plan.schema import (
    SaveMealPlanRequest,
    SaveMealPlanResponse,
    MealPlanListResponse,
    MealPlanWithTotals,
)

router = APIRouter()

def get_reconciler(db: Session = Depends(get_db)) -> PlanReconciler:
    return PlanReconciler(db)

def storage_error_response(e: PlanStorageError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": f"Server error during {e.step}",
            "step": e.step,
            "planId": e.plan_id,
            "partial": e.partial,
        },
    )

@router.post("/save-meal-plan", response_model=SaveMealPlanResponse)
def save_meal_plan(req: SaveMealPlanRequest, reconciler: PlanReconciler = Depends(get_reconciler)):
    """Create a plan, or fully replace the one named by mealPlanId"""
    try:
        plan_id = reconciler.save(req)
    except PlanNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PlanStorageError as e:
        return storage_error_response(e)

    message = "Meal plan updated successfully" if req.meal_plan_id is not None else "Meal plan created successfully"
    return SaveMealPlanResponse(message=message, meal_plan_id=plan_id)

@router.delete("/delete-meal-plan/{plan_id}")
def delete_meal_plan(plan_id: int, reconciler: PlanReconciler = Depends(get_reconciler)):
    try:
        reconciler.delete(plan_id)
    except PlanNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PlanStorageError as e:
        return storage_error_response(e)
    return {"success": True, "message": "Meal plan deleted successfully"}

@router.get("/meal-plan", response_model=MealPlanListResponse)
def list_meal_plans(reconciler: PlanReconciler = Depends(get_reconciler)):
    """All plans, newest id first, each with its details"""
    try:
        return MealPlanListResponse(meal_plans=reconciler.list_plans())
    except PlanStorageError as e:
        return storage_error_response(e)

@router.get("/meal-plan/{plan_id}", response_model=MealPlanWithTotals)
def get_meal_plan(plan_id: int, reconciler: PlanReconciler = Depends(get_reconciler)):
    try:
        return reconciler.get_plan(plan_id)
    except PlanNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PlanStorageError as e:
        return storage_error_response(e)
