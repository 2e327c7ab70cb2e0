"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overbooking
  locust -f locustfile.py --tags throughput   # Test catalog cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests

Set ADMIN_USERNAME / ADMIN_PASSWORD to the bootstrap admin of the target server.
"""

import os
import random
from datetime import date, timedelta

from locust import HttpUser, between, events, tag, task

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "change-me")

# Shared state
ACTIVITY_IDS = []
CONCURRENCY_ACTIVITY_ID = None
CONCURRENCY_DAY = (date.today() + timedelta(days=30)).isoformat()
CONCURRENCY_SPOTS = 10


def random_phone():
    return f"+2126{random.randint(10000000, 99999999)}"


def booking_payload(activity_id, day, people=1):
    return {
        "name": f"Load Tester {random.randint(1, 10000)}",
        "phone": random_phone(),
        "activityId": activity_id,
        "date": day,
        "people": people,
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: concurrency activity gets {CONCURRENCY_SPOTS} spots on {CONCURRENCY_DAY}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users -> 10 spots on one activity/day

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT SUM(people) FROM bookings WHERE activity_id = X AND date = 'D';
    Should be <= 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        if CONCURRENCY_ACTIVITY_ID:
            return

        resp = self.client.post("/api/login", json={
            "username": ADMIN_USERNAME,
            "password": ADMIN_PASSWORD,
        })
        if resp.status_code != 200:
            return

        headers = {"Authorization": f"Bearer {resp.json()['token']}"}
        resp = self.client.post("/api/activities",
            json={
                "title": "Concurrency Test Tour",
                "description": "Ten spots only, everyone wants one",
                "price": 100,
                "image": "/images/load-test.jpg",
                "maxGroupSize": CONCURRENCY_SPOTS,
            },
            headers=headers,
        )
        if resp.status_code == 201:
            globals()["CONCURRENCY_ACTIVITY_ID"] = resp.json()["id"]
            print(f"\nCreated activity {CONCURRENCY_ACTIVITY_ID} with {CONCURRENCY_SPOTS} spots\n")

    @tag("concurrency")
    @task
    def book_limited_spots(self):
        """All users fight for the same 10 spots."""
        if not CONCURRENCY_ACTIVITY_ID:
            return

        with self.client.post("/api/bookings",
            json=booking_payload(CONCURRENCY_ACTIVITY_ID, CONCURRENCY_DAY),
            catch_response=True,
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 400 and "remainingSpots" in resp.text:
                resp.success()  # Expected: sold out
            elif resp.status_code == 503:
                resp.success()  # Admission lock timed out under load
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Catalog cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the server, run again
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_activities_cached(self):
        resp = self.client.get("/api/activities", name="/api/activities [cached]")
        if resp.status_code == 200:
            for activity in resp.json():
                if activity["id"] not in ACTIVITY_IDS:
                    ACTIVITY_IDS.append(activity["id"])

    @tag("throughput", "read")
    @task(3)
    def month_availability(self):
        if ACTIVITY_IDS:
            month = date.today().strftime("%Y-%m")
            self.client.get(f"/api/availability/activity/{random.choice(ACTIVITY_IDS)}/{month}",
                name="/api/availability/activity/{id}/{month}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_activity(self):
        with self.client.post("/api/bookings",
            json=booking_payload(999999, CONCURRENCY_DAY),
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def zero_people(self):
        with self.client.post("/api/bookings",
            json=booking_payload(1, CONCURRENCY_DAY, people=0),
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def huge_group(self):
        with self.client.post("/api/bookings",
            json=booking_payload(1, CONCURRENCY_DAY, people=999999),
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/bookings",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, [400])

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.get("/api/bookings", catch_response=True) as resp:
            self._expect(resp, [401])
