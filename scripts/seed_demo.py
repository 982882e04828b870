#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with its menu, stock and tables
"""

import asyncio
import uuid

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEMO_SLUG = "chez-mama-akom"


async def seed_demo_data():
    """Seed demo data for development"""
    import app.models  # noqa: F401
    from app.database import SessionLocal, engine, Base
    from app.models.tenant import Restaurant, Table
    from app.models.menu import Category, Product
    from app.models.stock import Stock
    from app.models.user import User, UserRole, RestaurantUser, RestaurantRole
    from app.services.subscriptions import start_trial

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        from sqlalchemy import select
        result = await db.execute(
            select(Restaurant).where(Restaurant.slug == DEMO_SLUG)
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            name="Chez Mama Akôm",
            slug=DEMO_SLUG,
            phone="+241 01 23 45 67",
            address="Boulevard Triomphal",
            city="Libreville",
            primary_color="#E85D04",
            currency="XAF",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        start_trial(db, restaurant.id)

        # Create super admin user
        admin_user = User(
            id=uuid.uuid4(),
            email="admin@akom.app",
            hashed_password=pwd_context.hash("admin123"),
            full_name="Akôm Admin",
            role=UserRole.SUPER_ADMIN,
            is_active=True,
        )
        db.add(admin_user)

        # Create restaurant owner
        owner = User(
            id=uuid.uuid4(),
            email="mama@chez-mama.ga",
            hashed_password=pwd_context.hash("mama1234"),
            full_name="Mama Ngoua",
            is_active=True,
        )
        db.add(owner)
        await db.flush()

        db.add(RestaurantUser(user_id=owner.id, restaurant_id=restaurant.id, role=RestaurantRole.ADMIN))

        print("Creating tables...")

        for number in range(1, 6):
            db.add(Table(restaurant_id=restaurant.id, number=number, label=f"Table {number}", capacity=4))

        print("Creating menu...")

        menu = {
            "Plats": [
                {"name": "Poulet Nyembwe", "description": "Poulet mijoté à la sauce de noix de palme", "price": 4500},
                {"name": "Poisson braisé", "description": "Bar braisé, bananes plantains et piment", "price": 5000},
                {"name": "Feuilles de manioc", "description": "Feuilles de manioc pilées au poisson fumé", "price": 3500},
            ],
            "Accompagnements": [
                {"name": "Bâton de manioc", "description": None, "price": 500},
                {"name": "Alloco", "description": "Bananes plantains frites", "price": 1000},
            ],
            "Boissons": [
                {"name": "Régab", "description": "Bière locale 65cl", "price": 1000},
                {"name": "Jus de bissap", "description": "Fait maison", "price": 800},
                {"name": "Eau minérale", "description": "Andza 1,5L", "price": 700},
            ],
        }

        product_count = 0
        for order, (category_name, products) in enumerate(menu.items()):
            category = Category(restaurant_id=restaurant.id, name=category_name, display_order=order)
            db.add(category)
            await db.flush()

            for product_data in products:
                product = Product(
                    restaurant_id=restaurant.id,
                    category_id=category.id,
                    is_available=True,
                    **product_data,
                )
                db.add(product)
                await db.flush()
                db.add(Stock(restaurant_id=restaurant.id, product_id=product.id, quantity=50, alert_threshold=5))
                product_count += 1

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: {restaurant.name}
  ID: {restaurant.id}
  Public menu: /public/restaurants/{DEMO_SLUG}/menu

Users:
  Super Admin:
    Email: admin@akom.app
    Password: admin123

  Restaurant Admin:
    Email: mama@chez-mama.ga
    Password: mama1234

Menu: {product_count} products in {len(menu)} categories
Tables: 5
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
