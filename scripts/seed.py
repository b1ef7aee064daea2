"""Seed script: registers demo check-ins via the REST API.

Usage:
    python scripts/seed.py              # uses http://localhost:8090
    python scripts/seed.py http://host  # custom base URL
"""

import sys

import httpx

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8090"

USERS = [
    {
        "first_name": "Alice",
        "last_name": "Smith",
        "phone": "555-0100",
        "email": "alice@example.com",
    },
    {
        "first_name": "Bob",
        "last_name": "Jones",
        "phone": "555-0101",
        "email": "bob@example.com",
    },
    {
        "first_name": "Carol",
        "last_name": "Nguyen",
        "phone": "555-0102",
        "email": "carol@example.com",
    },
]


def check_health(client: httpx.Client) -> None:
    resp = client.get(f"{BASE_URL}/health")
    if resp.status_code != 200:
        raise SystemExit(f"Service is not healthy: {resp.text}")
    print(f"  {resp.json()['user_count']} users already registered")


def register(client: httpx.Client, user: dict) -> None:
    resp = client.post(f"{BASE_URL}/api/user", json=user)
    if resp.status_code == 201:
        created = resp.json()
        print(f"  Registered {user['email']} (id={created['id']})")
    elif resp.status_code == 400:
        print(f"  Rejected {user['email']}: {resp.text}")
    else:
        resp.raise_for_status()


def main() -> None:
    print(f"Seeding against {BASE_URL}\n")

    with httpx.Client(timeout=10) as client:
        print("Health:")
        check_health(client)

        print("\nUsers:")
        for user in USERS:
            register(client, user)

        resp = client.get(f"{BASE_URL}/api/users")
        resp.raise_for_status()
        print(f"\nNewest check-in: {resp.json()[0]['email']}")

    print("\nDone!")


if __name__ == "__main__":
    main()
