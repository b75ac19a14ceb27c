from src.household.services.auth_service import AuthService
from src.household.services.budget_service import BudgetService
from src.household.services.category_service import CategoryService
from src.household.services.expense_service import ExpenseService
from src.household.services.family_service import FamilyService
from src.household.services.settings_service import SettingsService

__all__ = [
    "AuthService",
    "BudgetService",
    "CategoryService",
    "ExpenseService",
    "FamilyService",
    "SettingsService",
]
