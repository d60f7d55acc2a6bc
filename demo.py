#!/usr/bin/env python
from sdk.pystore import StoreClient


def main():
    admin = StoreClient(base_url="http://127.0.0.1:8085", user_id=1, role="admin")
    alice = admin.as_user(2)

    # -----------------------------
    # Categories and products (admin)
    # -----------------------------
    print("Creating catalog...")
    furniture = admin.create_category("Furniture")
    chair = admin.register_product("Oak Chair", 120, furniture["id"], "Solid oak dining chair")
    table = admin.register_product("Oak Table", 450, furniture["id"], "Seats six")
    lamp = admin.register_product("Desk Lamp", 35, furniture["id"], "Warm light")
    print(chair)

    # -----------------------------
    # Reviews
    # -----------------------------
    alice.leave_review(chair["id"], 5, "Sturdy")
    alice.leave_review(lamp["id"], 2, "Too dim")

    # -----------------------------
    # Catalog queries (public)
    # -----------------------------
    print("\nSearching for 'oak', most expensive first...")
    print(alice.list_products(search_term="oak", sort="high-price"))

    print("\nProducts rated 4 or 5...")
    print(alice.list_products(ratings=[4, 5]))

    print("\nSimilar to the chair...")
    print(alice.similar_products(chair["id"]))

    # -----------------------------
    # Order and payment
    # -----------------------------
    print("\nPlacing order...")
    placed = alice.place_order([
        {"productId": chair["id"], "quantity": 2, "price": chair["price"]},
        {"productId": table["id"], "quantity": 1, "price": table["price"]},
    ])
    print(placed)

    payment = placed["payment"]
    print("\nGateway reports payment succeeded...")
    print(alice.send_payment_event("payment.succeeded", payment["description"], payment["metadata"]).json())

    print("\nListing orders...")
    print(alice.list_orders())
    print(alice.statistics())


if __name__ == "__main__":
    main()
