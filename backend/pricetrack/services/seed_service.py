"""Seed service for initial data"""
import logging

from sqlalchemy import select

from pricetrack.core.database import AsyncSessionLocal
from pricetrack.models.product import Brand, Category, Product
from pricetrack.models.supermarket import Branch, Supermarket
from pricetrack.models.user import User

logger = logging.getLogger(__name__)


async def seed_data(session_factory=AsyncSessionLocal) -> bool:
    """Seed a demo catalog if the database is empty. Returns True when it seeded."""
    async with session_factory() as db:
        # Check if already seeded
        result = await db.execute(select(Supermarket).limit(1))
        if result.scalar_one_or_none():
            return False

        lider = Supermarket(name="Lider")
        jumbo = Supermarket(name="Jumbo")
        unimarc = Supermarket(name="Unimarc")
        db.add_all([lider, jumbo, unimarc])
        await db.flush()

        branches = [
            Branch(supermarket_id=lider.id, name="Lider Providencia", address="Av. Providencia 1234", city="Santiago"),
            Branch(supermarket_id=lider.id, name="Lider Maipu", address="Av. Pajaritos 3030", city="Santiago"),
            Branch(supermarket_id=jumbo.id, name="Jumbo Costanera", address="Av. Andres Bello 2425", city="Santiago"),
            Branch(supermarket_id=unimarc.id, name="Unimarc Nunoa", address="Irarrazaval 3450", city="Santiago"),
        ]

        users = [
            User(name="Demo Shopper", email="demo@pricetrack.local"),
            User(name="Community Reporter", email="reporter@pricetrack.local"),
        ]

        brands = {name: Brand(name=name) for name in ("Colun", "Soprole", "Lucchetti", "Carozzi")}
        categories = {name: Category(name=name) for name in ("Dairy", "Pasta", "Pantry")}
        db.add_all(branches + users + list(brands.values()) + list(categories.values()))
        await db.flush()

        products = [
            Product(barcode="7802920000015", name="Leche Entera 1L", brand_id=brands["Colun"].id, category_id=categories["Dairy"].id),
            Product(barcode="7802900000022", name="Yoghurt Frutilla 125g", brand_id=brands["Soprole"].id, category_id=categories["Dairy"].id),
            Product(barcode="7802575000039", name="Spaghetti N5 400g", brand_id=brands["Lucchetti"].id, category_id=categories["Pasta"].id),
            Product(barcode="7802575000046", name="Salsa de Tomate 200g", brand_id=brands["Carozzi"].id, category_id=categories["Pantry"].id),
        ]
        db.add_all(products)
        await db.commit()
        logger.info("Database seeded with sample data")
        return True
