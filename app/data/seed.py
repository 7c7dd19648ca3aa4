# app/data/seed.py
from decimal import Decimal

from app.data.database import Base, SessionLocal, engine
from app.data.models import ProductModel, UserModel
from app.services.product_service import generate_sku

PRODUCTS = [
    ("Laptop Dell XPS 13", "Electronics", Decimal("18500000"), 15, 250),
    ("iPhone 14 Pro", "Electronics", Decimal("15999000"), 8, 520),
    ("Nike Air Max 270", "Fashion", Decimal("1899000"), 30, 180),
    ('Samsung 55" 4K Smart TV', "Electronics", Decimal("8500000"), 12, 145),
    ("Adidas Originals Hoodie", "Fashion", Decimal("899000"), 50, 320),
    ("Sony WH-1000XM5 Headphones", "Electronics", Decimal("5299000"), 20, 410),
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            return

        db.add_all([
            UserModel(id=1, username="seller", email="seller@example.com", role="SELLER"),
            UserModel(id=2, username="buyer", email="buyer@example.com", role="CUSTOMER"),
        ])
        db.flush()

        for name, category, price, stock, popularity in PRODUCTS:
            db.add(
                ProductModel(
                    sku=generate_sku(category, name),
                    name=name,
                    description=name,
                    category=category,
                    price=price,
                    stock=stock,
                    is_available=stock > 0,
                    popularity=popularity,
                    seller_id=1,
                )
            )
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
