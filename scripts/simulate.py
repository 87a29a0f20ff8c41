"""
Submission Simulation Script

Fires concurrent reservation and review submissions at a running API,
then reads both resources back and checks that every id is unique.
Run from project root: python scripts/simulate.py

Concurrent writes in a single server process are serialized by the event
loop; with several worker processes sharing the storage file, some
submissions can be lost (last full overlay write wins) and this script
reports how many.

Author: Your Name
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import date, datetime, timedelta
from typing import Any

import httpx

API_BASE_URL = "http://localhost:8001"
TOTAL_SUBMISSIONS = 50

# Sample data for random submissions
NAMES = ["Lan", "Minh", "Hùng", "Thảo", "Tuấn", "Emma", "David", "Linh", "Chris", "Mai"]
TIMES = ["11:30", "12:00", "12:30", "18:00", "18:30", "19:00", "19:30", "20:00"]
COMMENTS = [
    "Nem rán tuyệt vời!",
    "Great food, friendly staff.",
    "Phở hơi mặn nhưng vẫn ngon.",
    "Will come back with friends.",
    "Bún chả rất ngon.",
]


def generate_reservation() -> dict[str, Any]:
    day = date.today() + timedelta(days=random.randint(1, 30))
    return {
        "name": random.choice(NAMES),
        "phone": f"09{random.randint(10000000, 99999999)}",
        "date": day.isoformat(),
        "time": random.choice(TIMES),
        "guests": str(random.randint(1, 8)),
    }


def generate_review() -> dict[str, Any]:
    return {
        "name": random.choice(NAMES),
        "rating": random.randint(3, 5),
        "comment": random.choice(COMMENTS),
        "source": "Website Local",
    }


async def submit(
    client: httpx.AsyncClient,
    resource: str,
    num: int,
) -> dict[str, Any]:
    """POST one submission and time it."""
    payload = generate_review() if resource == "reviews" else generate_reservation()
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/{resource}", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json().get("data", {})
            return {"num": num, "resource": resource, "success": True, "id": data.get("id"), "time": elapsed}
        return {"num": num, "resource": resource, "success": False, "error": response.text[:100], "time": elapsed}
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {"num": num, "resource": resource, "success": False, "error": str(e)[:100], "time": elapsed}


async def verify(client: httpx.AsyncClient, results: list[dict[str, Any]]) -> bool:
    """Read both resources back and check ids."""
    ok = True
    for resource in ("reservations", "reviews"):
        response = await client.get(f"{API_BASE_URL}/api/{resource}")
        records = response.json()
        ids = [r.get("id") for r in records]
        duplicates = len(ids) - len(set(ids))

        written = {r["id"] for r in results if r["success"] and r["resource"] == resource}
        missing = written - set(ids)

        print(f"\n📋 {resource}: {len(records)} records")
        if duplicates:
            print(f"   ❌ {duplicates} duplicate ids")
            ok = False
        else:
            print("   ✅ No duplicate ids")
        if missing:
            print(f"   ⚠️ {len(missing)} confirmed submissions missing (lost updates)")
            ok = False
        else:
            print("   ✅ Every confirmed submission is present")
    return ok


async def run_simulation(num_submissions: int = TOTAL_SUBMISSIONS) -> bool:
    print("=" * 70)
    print("🔥 SUBMISSION SIMULATION")
    print("=" * 70)
    print(f"📋 Total Submissions: {num_submissions}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        health = await client.get(f"{API_BASE_URL}/health")
        if health.status_code != 200:
            print(f"❌ Health check failed: {health.text[:100]}")
            return False
        print(f"✅ Storage: {health.json().get('storage')}, "
              f"notifications: {health.json().get('notifications')}")

        tasks = [
            submit(client, "reviews" if i % 2 else "reservations", i + 1)
            for i in range(num_submissions)
        ]
        results = await asyncio.gather(*tasks)

        total_time = round(time.time() - start_time, 2)
        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        print(f"\n✅ Successful: {len(successful)}/{num_submissions}")
        print(f"❌ Failed: {len(failed)}/{num_submissions}")
        print(f"⏱️  Total Time: {total_time}s")

        if successful:
            avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
            print(f"   Average Response: {avg_time}s")

        for f in failed[:5]:
            print(f"   #{f['num']} [{f['resource']}]: {f.get('error', 'Unknown error')}")

        return await verify(client, results) and not failed


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Submission Simulation Script")
    parser.add_argument("--submissions", type=int, default=TOTAL_SUBMISSIONS, help="Number of submissions")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    ok = asyncio.run(run_simulation(args.submissions))
    sys.exit(0 if ok else 1)
