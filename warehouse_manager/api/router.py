# warehouse_manager/api/router.py
from fastapi import APIRouter
from warehouse_manager.modules.warehouses.router import router as warehouses_router
from warehouse_manager.modules.items.router import router as items_router
from warehouse_manager.modules.transfers.router import router as transfers_router
from warehouse_manager.modules.activity.router import router as activity_router


api_router = APIRouter()

api_router.include_router(
    warehouses_router,
    prefix="/warehouses",
    tags=["Warehouses"]
)

api_router.include_router(
    items_router,
    prefix="/warehouses/{warehouse_id}/items",
    tags=["Inventory Items"]
)

api_router.include_router(
    transfers_router,
    prefix="/transfers",
    tags=["Transfers"]
)

api_router.include_router(
    activity_router,
    prefix="/activity",
    tags=["Activity"]
)
