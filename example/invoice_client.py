# invoice_client.py
import asyncio
from typing import Any

import httpx

RPC_URL = "http://127.0.0.1:8002/jsonrpc"


async def call(client: httpx.AsyncClient, route: str, method: str, params: Any = None, id: int | str = 1):
    payload = {"jsonrpc": "2.0", "method": method, "id": id}
    if params is not None:
        payload["params"] = params
    resp = await client.post(f"{RPC_URL}{route}", json=payload)
    data = resp.json()
    if "error" in data:
        raise RuntimeError(f"{method} failed: {data['error']}")
    return data["result"]


async def invoice_management_demo():
    async with httpx.AsyncClient(timeout=10.0) as client:
        # 1) Methods listing
        methods = (await client.get("http://127.0.0.1:8002/methods")).json()
        for route in methods["result"]:
            names = ", ".join(m["name"] for m in route["methods"])
            print(f"{route['route'] or '(base)'}: {names}")

        # 2) Create two invoices, one with positional and one with named params
        inv1 = await call(client, "/billing", "create_invoice", ["ACME Corp", 150.0, "2030-01-31"])
        inv2 = await call(client, "/billing", "create_invoice", {"client": "Beta LLC", "amount": 200.5}, id="2")
        print("Created:", inv1["id"], inv2["id"])

        # 3) Batch: one call plus one payment notification (no id, no response)
        batch = [
            {"jsonrpc": "2.0", "method": "get_balance", "id": 3},
            {"jsonrpc": "2.0", "method": "process_payment", "params": [inv1["id"], 150.0]},
        ]
        resp = await client.post(f"{RPC_URL}/billing", json=batch)
        print("Batch:", resp.json())

        # 4) Base method, no route
        print("Health:", await call(client, "", "health"))


if __name__ == "__main__":
    asyncio.run(invoice_management_demo())
