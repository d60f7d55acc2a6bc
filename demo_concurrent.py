import asyncio
from sdk.pystore import StoreClient


async def deliver(client, payment, attempt):
    r = await client.send_payment_event_async("payment.succeeded", payment["description"], payment["metadata"])
    body = r.json()
    if r.status_code == 200:
        marker = "✅ changed" if body.get("changed") else "↩️  duplicate ignored"
        print(f"delivery {attempt}: {marker} (order {body.get('order_id')} is {body.get('status')})")
    else:
        print(f"❌ delivery {attempt}: HTTP {r.status_code} {body}")


async def main():
    admin = StoreClient(base_url="http://127.0.0.1:8085", user_id=1, role="admin")
    bob = admin.as_user(3)

    category = admin.create_category("Electronics")
    laptop = admin.register_product("Gaming Laptop", 5000, category["id"])
    placed = bob.place_order([{"productId": laptop["id"], "quantity": 1, "price": laptop["price"]}])
    print(f"\n🧾 Order {placed['order']['id']} placed, status {placed['order']['status']}")

    # the gateway delivers at least once; simulate it sending the same event five times at once
    print("\n⚡ Delivering the same payment event concurrently...")
    await asyncio.gather(*(deliver(bob, placed["payment"], n) for n in range(1, 6)))

    print("\n🧾 Bob orders:", bob.list_orders())


if __name__ == "__main__":
    asyncio.run(main())
