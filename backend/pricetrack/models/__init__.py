from pricetrack.models.user import User
from pricetrack.models.supermarket import Supermarket, Branch
from pricetrack.models.product import Brand, Category, Product
from pricetrack.models.purchase import Purchase, PurchaseLineItem
from pricetrack.models.observation import PriceObservation

__all__ = [
    "User",
    "Supermarket",
    "Branch",
    "Brand",
    "Category",
    "Product",
    "Purchase",
    "PurchaseLineItem",
    "PriceObservation",
]
