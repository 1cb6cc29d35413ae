import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, status

from finance_dashboard.core.errors import NotFoundError, ValidationFailedError
from finance_dashboard.core.security import CurrentUser, get_current_user
from finance_dashboard.db.base import CategoryStore, TransactionStore
from finance_dashboard.db.stores import get_category_store, get_transaction_store
from finance_dashboard.models.category import CategoryCreate, CategoryInDB, CategoryPublic, CategoryUpdate
from finance_dashboard.utils.categories import delete_category as delete_category_and_detach
from finance_dashboard.utils.categories import seed_default_categories
from finance_dashboard.utils.dates import utcnow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[CategoryPublic])
def list_categories(
    user: CurrentUser = Depends(get_current_user),
    store: CategoryStore = Depends(get_category_store),
):
    categories = store.find_by_user(user.user_id)
    if not categories:
        seed_default_categories(store, user.user_id)
        categories = store.find_by_user(user.user_id)
    return [CategoryPublic(**category) for category in categories]


@router.post("/", response_model=CategoryPublic, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    user: CurrentUser = Depends(get_current_user),
    store: CategoryStore = Depends(get_category_store),
):
    if store.find_by_name(user.user_id, payload.name, payload.type):
        raise ValidationFailedError("Category already exists")

    category = CategoryInDB(user_id=user.user_id, **payload.model_dump())
    saved = store.put(category.to_record())
    logger.info(f"Created category {category.name} ({category.type}) for user {user.user_id}")
    return CategoryPublic(**saved)


@router.put("/{category_id}", response_model=CategoryPublic)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    user: CurrentUser = Depends(get_current_user),
    store: CategoryStore = Depends(get_category_store),
):
    existing = store.get(user.user_id, category_id)
    if not existing:
        raise NotFoundError("Category not found")

    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    merged = {**existing, **changes}
    duplicate = store.find_by_name(user.user_id, merged["name"], merged["type"])
    if duplicate and duplicate["id"] != category_id:
        raise ValidationFailedError("Category already exists")

    changes["updated_at"] = utcnow()
    updated = store.update(user.user_id, category_id, changes)
    if not updated:
        raise NotFoundError("Category not found")
    return CategoryPublic(**updated)


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    user: CurrentUser = Depends(get_current_user),
    store: CategoryStore = Depends(get_category_store),
    transactions: TransactionStore = Depends(get_transaction_store),
) -> Dict:
    if not delete_category_and_detach(store, transactions, user.user_id, category_id):
        raise NotFoundError("Category not found")
    return {"message": "Category deleted successfully"}
