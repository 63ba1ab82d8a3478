"""Manual smoke run against a live server (uvicorn src.main:app --port 8000).

The admin key must belong to INITIAL_ADMIN so the operator calls succeed:
    ADMIN_KEY=0x... python run_api_tests.py
"""

import json
import os
import time
import urllib.error
import urllib.request

from eth_account import Account
from eth_account.messages import encode_defunct

BASE = "http://localhost:8000/api/v1"
ETHER = 10**18

ADMIN = Account.from_key(os.environ.get("ADMIN_KEY", "0x" + "01" * 32))
SELLER = Account.from_key("0x" + "02" * 32)
BUYER = Account.from_key("0x" + "03" * 32)

def post(path, body, token=None):
    data = json.dumps(body).encode()
    req = urllib.request.Request(
        f"{BASE}{path}",
        data=data,
        headers={"Content-Type": "application/json"}
    )
    if token:
        req.add_header("Authorization", f"Bearer {token}")
    try:
        with urllib.request.urlopen(req) as r:
            return json.loads(r.read())
    except urllib.error.HTTPError as e:
        return json.loads(e.read())

def get(path, token=None, params=None):
    url = f"{BASE}{path}"
    if params:
        url += "?" + "&".join(f"{k}={v}" for k, v in params.items())
    req = urllib.request.Request(url)
    if token:
        req.add_header("Authorization", f"Bearer {token}")
    try:
        with urllib.request.urlopen(req) as r:
            return json.loads(r.read())
    except urllib.error.HTTPError as e:
        return json.loads(e.read())

def section(title):
    print(f"\n{'='*60}")
    print(f"### {title} ###")
    print('='*60)

def label(name):
    print(f"\n--- {name} ---")

def out(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))

def login(account):
    challenge = post("/auth/challenge", {"address": account.address})
    message = challenge.get("data", {}).get("message", "")
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    r = post("/auth/login", {"address": account.address, "signature": "0x" + bytes(signed.signature).hex()})
    out(r)
    return r.get("data", {}).get("access_token", "")

# ── Login ──────────────────────────────────────────────────────
section("WALLET LOGIN")

label("Login admin")
TA = login(ADMIN)

label("Login seller")
TS = login(SELLER)

label("Login buyer")
TB = login(BUYER)

label("Login with a signature from the wrong wallet")
challenge = post("/auth/challenge", {"address": BUYER.address})
wrong = Account.sign_message(
    encode_defunct(text=challenge.get("data", {}).get("message", "")), private_key=SELLER.key
)
out(post("/auth/login", {"address": BUYER.address, "signature": "0x" + bytes(wrong.signature).hex()}))

label("Protected endpoint with no token")
out(post("/account/deposit", {"value": 1}))

# ── Admin ──────────────────────────────────────────────────────
section("ADMIN")

label("Market config")
out(get("/admin/config"))

label("Fee rate above the cap")
out(post("/admin/fee-rate", {"fee_rate": 1001}, token=TA))

label("Pause without PAUSER role (buyer)")
out(post("/admin/pause", {}, token=TB))

# ── Funding ────────────────────────────────────────────────────
section("FUNDING")

label("Operator credits the buyer wallet with 10 native")
out(post("/custody/credit", {"owner": BUYER.address, "amount": 10 * ETHER}, token=TA))

label("Buyer deposits 5")
out(post("/account/deposit", {"value": 5 * ETHER}, token=TB))

label("Buyer balance")
out(get(f"/account/{BUYER.address}/balance"))

label("Withdraw more than deposited")
out(post("/account/withdraw", {"amount": 50 * ETHER}, token=TB))

# ── Assets ─────────────────────────────────────────────────────
section("ASSETS")

label("Admin grants itself MINTER")
out(post("/admin/roles/grant", {"role": "MINTER", "account": ADMIN.address}, token=TA))

label("Admin mints to the seller")
r = post("/assets/mint-with-role", {"to": SELLER.address, "uri": "ipfs://smoke"}, token=TA)
out(r)
TOKEN_ID = r.get("data", {}).get("token_id", 0)

label("Seller approves the market")
out(post("/assets/approve", {"token_id": TOKEN_ID}, token=TS))

# ── Settlement ─────────────────────────────────────────────────
section("SETTLEMENT")

print("Signed Order/Offer payloads need the EIP-712 domain; see tests/unit/test_signing.py.")

label("Nonce status (legacy numeric form)")
out(get("/settlement/nonces/ORDER/1"))

label("Fulfill with a malformed signature")
expiry = int(time.time()) + 3600
out(post("/settlement/fulfill", {
    "order": {"token_id": TOKEN_ID, "min_price": ETHER, "expire_time": expiry, "nonce": 1, "signature": "0x00"},
    "offer": {"token_id": TOKEN_ID, "price": ETHER, "expire_time": expiry, "nonce": 1, "signature": "0x00"},
}, token=TB))

# ── Fees ───────────────────────────────────────────────────────
section("FEES")

label("Platform fee pool (native)")
out(get("/fees/0x0000000000000000000000000000000000000000"))

label("Withdraw fees without ADMIN role")
out(post("/fees/withdraw", {}, token=TB))

label("Recent events")
out(get("/admin/events", params={"limit": 5}))

print("\n\n=== ALL TESTS COMPLETE ===\n")
