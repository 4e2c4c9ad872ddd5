"""Seed script for development data.

Run with:  python -m hrdesk.seed
The API must be running; employees live in the in-memory directory of the
API process, so re-run the seed after every API restart.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

# Well-known employee UUIDs
ALICE_ID = "00000000-0000-0000-0000-000000000002"
BOB_ID = "00000000-0000-0000-0000-000000000003"
CAROL_ID = "00000000-0000-0000-0000-000000000004"

EMPLOYEES = [
    {
        "id": ALICE_ID,
        "first_name": "Alice",
        "last_name": "Johnson",
        "email": "alice.johnson@example.com",
        "department": "Engineering",
        "hire_date": "2023-01-15",
    },
    {
        "id": BOB_ID,
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.smith@example.com",
        "department": "Sales",
        "hire_date": "2023-06-01",
    },
    {
        "id": CAROL_ID,
        "first_name": "Carol",
        "last_name": "Williams",
        "email": "carol.williams@example.com",
        "department": "Finance",
        "hire_date": "2024-03-01",
    },
]

LEAVE_TYPES = ["Annual Leave", "Sick Leave", "Unpaid Leave"]

# Allocations: (employee_id, leave type name, days)
ALLOCATIONS = [
    (ALICE_ID, "Annual Leave", "20"),
    (ALICE_ID, "Sick Leave", "10"),
    (BOB_ID, "Annual Leave", "15"),
    (BOB_ID, "Sick Leave", "10"),
    (CAROL_ID, "Annual Leave", "12.5"),
    (CAROL_ID, "Sick Leave", "5"),
]


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict, label: str, headers: dict) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _safe_put(
    client: httpx.AsyncClient, url: str, json: dict, label: str, params: dict | None = None
) -> dict | None:
    """PUT (upsert), naturally idempotent."""
    resp = await client.put(url, json=json, headers=HEADERS, params=params)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    """Seed employees via PUT (upsert)."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        body = {k: v for k, v in emp.items() if k != "id"}
        await _safe_put(
            client,
            f"{BASE_URL}/employees/{emp['id']}",
            body,
            f"{emp['first_name']} {emp['last_name']}",
        )


async def seed_leave_types(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed leave types and return a name->id mapping."""
    print("\n--- Seeding leave types ---")
    for name in LEAVE_TYPES:
        await _safe_post(client, f"{BASE_URL}/leave-types", {"name": name}, f"Leave type: {name}", HEADERS)

    # Some may have existed already (409), so read the ids back from the list
    resp = await client.get(f"{BASE_URL}/leave-types", headers=HEADERS)
    resp.raise_for_status()
    return {item["name"]: item["id"] for item in resp.json()["items"]}


async def seed_allocations(client: httpx.AsyncClient, leave_type_ids: dict[str, str], year: int) -> None:
    """Set the yearly allocation of every seeded employee."""
    print(f"\n--- Seeding allocations for {year} ---")
    for employee_id, leave_type_name, days in ALLOCATIONS:
        leave_type_id = leave_type_ids.get(leave_type_name)
        if not leave_type_id:
            print(f"  [SKIP] {leave_type_name} not found for allocation")
            continue
        await _safe_put(
            client,
            f"{BASE_URL}/employees/{employee_id}/leave-balances/{leave_type_id}",
            {"allocated_days": days},
            f"Allocate {employee_id[:12]}... {leave_type_name} = {days}",
            params={"year": year},
        )


async def seed_requests(client: httpx.AsyncClient, leave_type_ids: dict[str, str]) -> None:
    """File a pending request for Bob and an approved one for Carol."""
    print("\n--- Seeding requests ---")
    annual_id = leave_type_ids.get("Annual Leave")
    sick_id = leave_type_ids.get("Sick Leave")
    today = date.today()

    if annual_id:
        start = today + timedelta(days=14)
        await _safe_post(
            client,
            f"{BASE_URL}/leave-requests",
            {
                "employee_id": BOB_ID,
                "leave_type_id": annual_id,
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=2)).isoformat(),
                "reason": "Family vacation",
            },
            "Request: Bob 3-day vacation (pending)",
            {**HEADERS, "X-User-Id": BOB_ID, "X-Role": "employee"},
        )

    if sick_id:
        start = today + timedelta(days=3)
        result = await _safe_post(
            client,
            f"{BASE_URL}/leave-requests",
            {
                "employee_id": CAROL_ID,
                "leave_type_id": sick_id,
                "start_date": start.isoformat(),
                "end_date": start.isoformat(),
                "reason": "Doctor appointment",
            },
            "Request: Carol 1-day sick leave",
            {**HEADERS, "X-User-Id": CAROL_ID, "X-Role": "employee"},
        )
        if result:
            resp = await client.put(
                f"{BASE_URL}/leave-requests/{result['id']}",
                json={"status": "approved"},
                headers=HEADERS,
            )
            if resp.status_code == 200:
                print("  [OK] Approved Carol's sick leave request")
            else:
                print(f"  [ERROR] Approving Carol's request: {resp.status_code}")


async def main() -> None:
    print("=" * 60)
    print("  HR Desk: Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running (uvicorn hrdesk.main:app)")
            sys.exit(1)

        await seed_employees(client)
        leave_type_ids = await seed_leave_types(client)
        await seed_allocations(client, leave_type_ids, date.today().year)
        await seed_requests(client, leave_type_ids)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
