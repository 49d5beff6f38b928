"""
Table Rush Simulation Script

Simulates many tables ordering at once: each simulated visitor scans a
table link, fills a cart from the live menu, checks out and follows the
order through the history poller.
Run from project root: python scripts/simulate.py

Version: 1.0.0
"""

import asyncio
import sys
import os
import random
import time
import argparse
from datetime import datetime
from typing import Any

import httpx
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from qrmenu.client import MenuClient, OrderHistoryPoller
from qrmenu.core.currency import format_price

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 30

# Sample data for random orders
CUSTOMER_NAMES = ["Budi", "Siti", "Andi", "Dewi", "Rudi", "Ayu", "Eka", "Putri", "Agus", "Rina"]
TABLES = [f"{row}{n}" for row in "ABC" for n in range(1, 9)]
NOTES = ["", "", "", "Extra spicy", "No chili", "Less salt"]


async def place_random_order(menu: list[dict], order_num: int, watch: float) -> dict[str, Any]:
    """One visitor: scan, fill the cart, check out, watch the order."""
    table = random.choice(TABLES)
    start_time = time.time()

    try:
        async with MenuClient(API_BASE_URL, table=table) as client:
            for item in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
                await client.add_to_cart(item, quantity=random.randint(1, 3), note=random.choice(NOTES))

            result = await client.checkout(random.choice(CUSTOMER_NAMES))
            elapsed = round(time.time() - start_time, 3)
            if result["status"] != "success":
                return {
                    "order_num": order_num,
                    "success": False,
                    "error": str(result.get("errors"))[:100],
                    "time": elapsed,
                }

            updates = []
            if watch > 0:
                poller = OrderHistoryPoller(client, updates.append, interval=min(watch, 1.0))
                poller.start()
                await asyncio.sleep(watch)
                await poller.stop()
            await client.dismiss_checkout()

            return {
                "order_num": order_num,
                "success": True,
                "order_code": result["order_code"],
                "table": table,
                "total": result["total"],
                "polls": len(updates),
                "time": elapsed,
            }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS, watch: float = 0.0) -> dict[str, Any]:
    """
    Run the table rush.

    Args:
        num_orders: Number of visitors placing an order
        watch: Seconds each visitor keeps polling its order history
    """
    print("=" * 70)
    print("🔥 TABLE RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with MenuClient(API_BASE_URL) as browser:
        menu = [item for item in await browser.menu_items() if item["available"]]
    if not menu:
        print("\n❌ The menu is empty. Run: python scripts/seed_menu.py")
        return {"total": num_orders, "successful": 0, "failed": num_orders, "results": []}

    start_time = time.time()
    print("\n🚀 Seating tables...\n")
    results = await asyncio.gather(*[place_random_order(menu, i + 1, watch) for i in range(num_orders)])
    total_time = round(time.time() - start_time, 2)

    # Analyze results
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total", 0) for r in successful)

        print(f"\n📈 Performance Metrics:")
        print(f"   Average Checkout: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Ordered: {format_price(total_revenue)}")

    if failed:
        print(f"\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print(f"Open {API_BASE_URL}/admin to see the orders arrive")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def check_health() -> bool:
    """Pre-flight check before the rush."""
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health")
        except httpx.HTTPError as e:
            print(f"   ❌ Server unreachable: {e}")
            return False
    if response.status_code != 200:
        print(f"   ❌ Failed: {response.text}")
        return False
    data = response.json()
    print(f"   ✅ Status: {data.get('status')}")
    print(f"   Database: {data.get('database')}")
    print(f"   State storage: {data.get('state_storage')}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Table Rush Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--watch", type=float, default=0.0, help="Seconds each visitor polls its order history")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()
    API_BASE_URL = args.url.rstrip("/")

    print("\n🩺 Health Check...")
    if not asyncio.run(check_health()):
        print("\n❌ Pre-flight check failed. Start the server first.")
        sys.exit(1)

    asyncio.run(run_simulation(args.orders, args.watch))
