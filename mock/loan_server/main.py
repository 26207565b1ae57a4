from decimal import Decimal
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from pathlib import Path
import itertools
import json
import os

app = FastAPI(title="Mock Loan Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/loan_stub") if os.path.exists("/loan_stub") else Path(__file__).resolve().parents[2] / "loan_stub"

DEFAULT_CUSTOMERS = [
    {"id": 1, "account_number": "ACC100", "issue_date": "2024-01-15", "interest_rate": "8.50", "tenure": 24, "emi_due": "75.00"},
    {"id": 2, "account_number": "ACC200", "issue_date": "2023-06-01", "interest_rate": "10.25", "tenure": 36, "emi_due": "1250.00"},
    {"id": 3, "account_number": "ACC300", "issue_date": "2024-09-30", "interest_rate": "7.00", "tenure": 12, "emi_due": "0.00"},
]


def load_customers() -> list[dict]:
    file = DATA_DIR / "customers.json"
    return json.loads(file.read_text()) if file.exists() else [dict(c) for c in DEFAULT_CUSTOMERS]


customers = load_customers()
payment_ids = itertools.count(1)


class PaymentIn(BaseModel):
    account_number: str
    amount: Decimal


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/customers")
def get_customers():
    return customers

@app.post("/payments", status_code=201)
def create_payment(body: PaymentIn):
    customer = next((c for c in customers if c["account_number"] == body.account_number), None)
    if customer is None:
        raise HTTPException(status_code=404, detail="account not found")
    due = Decimal(customer["emi_due"])
    if body.amount <= 0 or body.amount > due:
        raise HTTPException(status_code=400, detail="invalid payment amount")
    new_balance = due - body.amount
    customer["emi_due"] = f"{new_balance:.2f}"
    return {
        "msg": "Payment successful",
        "payment": {
            "payment_id": next(payment_ids),
            "customer_id": customer["id"],
            "payment_amount": f"{body.amount:.2f}",
            "status": "completed",
        },
        "new_balance": float(new_balance),
    }
