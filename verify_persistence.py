import time
import subprocess
import httpx
import sys
import os
import signal

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for i in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def start_server(echo=False):
    env = {**os.environ, "DB_ECHO": "True"} if echo else None
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "groupledger.app.main:app", "--host", "127.0.0.1", "--port", "8000"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    # 1. Start Server (First Run)
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(echo=True)

    try:
        if not wait_for_server():
            server_logs = proc.communicate(timeout=2)
            print("Server Stdout:", server_logs[0].decode())
            print("Server Stderr:", server_logs[1].decode())
            raise Exception("Server start failed")

        # 2. Users, group and one expense
        print("\n--- [Step 2] Recording an Expense (Persistence Test) ---")
        for user_id in ("persist-a", "persist-b"):
            resp = httpx.post(f"{BASE_URL}{API_PREFIX}/users", json={
                "id": user_id, "email": f"{user_id}@test.com", "display_name": user_id
            })
            if resp.status_code not in (200, 201):
                raise Exception(f"User sync failed: {resp.status_code} {resp.text}")

        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/groups/code/PERSIST1")
        if resp.status_code == 200:
            print("⚠️ Group already exists (persistence working from previous run?)")
            group_id = resp.json()["id"]
        else:
            resp = httpx.post(f"{BASE_URL}{API_PREFIX}/groups", json={
                "name": "Persistence", "code": "PERSIST1", "created_by": "persist-a"
            })
            group_id = resp.json()["id"]
            httpx.post(f"{BASE_URL}{API_PREFIX}/group-members", json={"group_id": group_id, "user_id": "persist-b"})
            resp = httpx.post(f"{BASE_URL}{API_PREFIX}/expenses", json={
                "expense": {
                    "group_id": group_id, "title": "Check", "amount": "20.00",
                    "paid_by": "persist-a", "split_type": "equal", "created_by": "persist-a",
                }
            })
            if resp.status_code != 201:
                raise Exception(f"Expense failed: {resp.status_code} {resp.text}")
            print("✅ Expense Recorded")

    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # Wait for port release

    # 3. Restart Server
    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Checking Balance (Post-Restart) ---")
        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/users/persist-b/groups/{group_id}/balance")
        if resp.status_code == 200 and resp.json()["balance"] != "0.00":
            print(f"✅ Balance Persisted: {resp.json()['balance']}")
        else:
            raise Exception(f"Balance missing after restart: {resp.status_code} {resp.text}")

    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
