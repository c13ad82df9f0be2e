# invoice_server.py
import asyncio
import uuid
from datetime import date, datetime, timezone

from rpcrouter.server.registry import RouteTable

# Simple in-memory DB (demo only)
INVOICES = {}  # invoice_id -> dict
UNPROCESSED_PAYMENTS = []  # just to simulate notifications

settings = {
    "host": "127.0.0.1",
    "port": 8002,
    "mount_path": "/jsonrpc",
}

rpc = RouteTable(name="billing", settings=settings)
rpc.annotate_route("/billing", "Invoices and payments")


@rpc.register(
    "create_invoice",
    path="/billing",
    annotation="Create an invoice",
    param_annotations={"due": "ISO-8601 date, e.g. 2030-01-31"},
)
def create_invoice(client: str, amount: float, due: date | None = None):
    """Create invoice and return it"""
    invoice_id = str(uuid.uuid4())
    invoice = {
        "id": invoice_id,
        "client": client,
        "amount": amount,
        "due": due.isoformat() if due else None,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "paid": False,
    }
    INVOICES[invoice_id] = invoice
    return invoice


@rpc.register("get_invoice", path="/billing", annotation="Get invoice by id")
def get_invoice(invoice_id: str):
    inv = INVOICES.get(invoice_id)
    if not inv:
        raise ValueError("invoice not found")
    return inv


@rpc.register("list_invoices", path="/billing", annotation="List all invoices")
def list_invoices():
    return list(INVOICES.values())


@rpc.register("get_balance", path="/billing", annotation="Get total outstanding balance")
def get_balance():
    total = sum(inv["amount"] for inv in INVOICES.values() if not inv["paid"])
    return {"outstanding_balance": total, "count": len([i for i in INVOICES.values() if not i["paid"]])}


@rpc.register("process_payment", path="/billing", annotation="Mark an invoice paid; send as a notification")
async def process_payment(invoice_id: str, amount: float):
    UNPROCESSED_PAYMENTS.append({"invoice_id": invoice_id, "amount": amount})
    # simulate background work
    await asyncio.sleep(0.5)
    inv = INVOICES.get(invoice_id)
    if inv and not inv["paid"] and amount >= inv["amount"]:
        inv["paid"] = True
        inv["paid_at"] = datetime.now(timezone.utc).isoformat()
        return {"status": "paid", "invoice_id": invoice_id}
    return {"status": "ignored", "invoice_id": invoice_id}


@rpc.register("health")
def health():
    return {"status": "healthy", "invoices": len(INVOICES)}


if __name__ == "__main__":
    rpc.run(host="127.0.0.1", port=8002)
