"""
Pre-Deploy and Smoke Test Script.

Runs the application in-process against the configured database and
checks the read-only surfaces:
1. Health Check
2. Ledger verification counts
3. Member roster CSV export
4. Import run history
"""

import sys

from fastapi.testclient import TestClient
from backend.app.main import app
from backend.app.services.reporting import ROSTER_COLUMNS


def print_step(step, msg):
    print(f"[{step}] {msg}")

def fail(msg):
    print(f"❌ FAILURE: {msg}")
    sys.exit(1)

def success(msg):
    print(f"✅ {msg}")


def main():
    print("🚀 Starting Deployment Validation...")

    # The context manager runs the lifespan (table creation)
    with TestClient(app) as client:
        # 1. Health Check
        print_step("PRE-DEPLOY", "Checking /health...")
        try:
            response = client.get("/health")
        except Exception as e:
            fail(f"Health check died: {e}")
        if response.status_code != 200:
            fail(f"Health check returned {response.status_code}")
        success("Health check passed")

        # 2. Ledger verification (proves DB connection + query path)
        print_step("VERIFY", "Checking ledger verification counts...")
        res = client.get("/v1/admin/ledger/verification", params={"sample": 3})
        if res.status_code != 200:
            fail(f"Ledger verification failed: {res.status_code} {res.text}")
        stats = res.json()
        success(f"Ledger entries: {stats['total_entries']} ({stats['with_external_id']} with external id)")

        # 3. Roster export
        print_step("SMOKE", "Exporting member roster...")
        res = client.get("/v1/admin/reports/members.csv")
        if res.status_code != 200:
            fail(f"Roster export failed: {res.status_code}")
        header = res.text.splitlines()[0] if res.text else ""
        if header != ",".join(ROSTER_COLUMNS):
            fail(f"Unexpected roster header: {header!r}")
        rows = max(len(res.text.splitlines()) - 1, 0)
        if not rows:
            print("⚠️ No members found. Smoke test incomplete but DB connected.")
        else:
            success(f"Roster has {rows} members")

        # 4. Import history
        print_step("SMOKE", "Listing recent import runs...")
        res = client.get("/v1/admin/ledger/imports", params={"limit": 5})
        if res.status_code != 200:
            fail(f"Import history failed: {res.status_code}")
        success(f"Found {len(res.json())} recent import runs")

    success("Deployment Validation Passed!")

if __name__ == "__main__":
    main()
