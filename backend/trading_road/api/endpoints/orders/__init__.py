"""
Order API package

Split by concern:
- core: shared queries, scoping and response building
- crud: list, detail and drafts
- items: draft line items and stock reservation
- actions: submit, status, payment and invoice
- messages: order chat
- ratings: rating a delivered order
"""

from fastapi import APIRouter
from .crud import router as crud_router
from .items import router as items_router
from .actions import router as actions_router
from .messages import router as messages_router
from .ratings import router as ratings_router

router = APIRouter()

# crud goes first so /draft is matched before /{order_id}
router.include_router(crud_router, prefix="/orders")
router.include_router(items_router, prefix="/orders")
router.include_router(actions_router, prefix="/orders")
router.include_router(messages_router, prefix="/orders")
router.include_router(ratings_router, prefix="/orders")
