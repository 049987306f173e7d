"""Import all models so SQLModel.metadata picks them up."""

from menuboard.models.menu_item import (
    Allergen,
    CreatorSummary,
    DietaryTag,
    MenuCategory,
    MenuItem,
    MenuItemCreate,
    MenuItemIngredient,
    MenuItemPage,
    MenuItemRead,
    MenuItemUpdate,
)
from menuboard.models.restaurant import (
    Address,
    Contact,
    Cuisine,
    Currency,
    Restaurant,
    RestaurantRead,
    RestaurantSettings,
    RestaurantSummary,
    RestaurantUpdate,
)
from menuboard.models.user import ProfileUpdate, User, UserCreate, UserRead, UserRole, UserUpdate

__all__ = [
    "Address",
    "Allergen",
    "Contact",
    "CreatorSummary",
    "Cuisine",
    "Currency",
    "DietaryTag",
    "MenuCategory",
    "MenuItem",
    "MenuItemCreate",
    "MenuItemIngredient",
    "MenuItemPage",
    "MenuItemRead",
    "MenuItemUpdate",
    "ProfileUpdate",
    "Restaurant",
    "RestaurantRead",
    "RestaurantSettings",
    "RestaurantSummary",
    "RestaurantUpdate",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
    "UserUpdate",
]
