#!/usr/bin/env python3
"""
Live smoke test for the hospital management API.

Drives the billing scenario against a running server: register a
patient, raise a 1000 bill, pay 400 then 600, confirm a further payment
is refused, submit and approve an insurance claim, then read the finance
statistics.  Records created along the way are deleted at the end.

    python smoke_api.py [BASE_URL]
"""
import sys
import time
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import requests

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8000"


@dataclass
class CheckResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    description: str = ""


class SmokeRunner:
    def __init__(self):
        self.session = requests.Session()
        self.results: List[CheckResult] = []
        self.errors: List[CheckResult] = []

    def call(self, method: str, endpoint: str, data: Optional[Dict] = None,
             expected_status: int = 200, description: str = "") -> Optional[Any]:
        """Send one request, record the outcome and return the decoded body on success."""
        url = f"{BASE_URL}{endpoint}"
        start_time = time.time()
        try:
            response = self.session.request(method.upper(), url, json=data, timeout=10)
        except requests.RequestException as e:
            result = CheckResult(False, endpoint, method, 0, time.time() - start_time, str(e), description)
            print(f"❌ {method} {endpoint} - {e}")
            self.results.append(result)
            self.errors.append(result)
            return None
        response_time = time.time() - start_time
        ok = response.status_code == expected_status
        result = CheckResult(
            success=ok,
            endpoint=endpoint,
            method=method,
            status_code=response.status_code,
            response_time=response_time,
            error_message="" if ok else response.text[:200],
            description=description,
        )
        self.results.append(result)
        if not ok:
            self.errors.append(result)
            print(f"❌ {method} {endpoint} - expected {expected_status}, got {response.status_code} ({response_time:.2f}s)")
            return None
        print(f"✅ {method} {endpoint} - {description} ({response_time:.2f}s)")
        return response.json()

    def expect(self, condition: bool, description: str):
        result = CheckResult(condition, "-", "CHECK", 0, 0, "" if condition else "assertion failed", description)
        self.results.append(result)
        if condition:
            print(f"✅ {description}")
        else:
            self.errors.append(result)
            print(f"❌ {description}")

    def run(self) -> bool:
        self.call("GET", "/healthz", description="health check")

        patient = self.call("POST", "/api/patients", {
            "name": "Smoke Test Patient",
            "age": 40,
            "gender": "Other",
            "contactNumber": "9000099999",
            "address": "1 Test Lane",
        }, 201, "register patient")
        if not patient:
            return self.report()

        bill = self.call("POST", "/api/finance/bills", {
            "patient": patient["_id"],
            "billType": "Consultation",
            "items": [{"name": "Consultation", "quantity": 1, "unitPrice": 1000, "amount": 1000}],
            "totalAmount": 1000,
            "dueDate": (date.today() + timedelta(days=15)).isoformat(),
        }, 201, "create bill")
        if not bill:
            return self.report()
        payments = f"/api/finance/bills/{bill['_id']}/payments"

        first = self.call("POST", payments, {"amount": 400}, 200, "pay 400")
        self.expect(bool(first) and first["bill"]["paymentStatus"] == "Partial", "bill is Partial after 400")
        second = self.call("POST", payments, {"amount": 600, "method": "Credit Card"}, 200, "pay 600")
        self.expect(bool(second) and second["bill"]["paymentStatus"] == "Paid", "bill is Paid after 1000")
        refused = self.call("POST", payments, {"amount": 1}, 400, "overpayment refused")
        self.expect(bool(refused) and refused["message"].endswith("0.00"), "overpayment reports zero remaining")
        self.call("POST", payments, {"amount": -5}, 400, "negative amount refused")

        claim = self.call("POST", "/api/finance/insurance", {
            "patient": patient["_id"],
            "bill": bill["_id"],
            "insuranceProvider": "Smoke Health",
            "policyNumber": "SMOKE-1",
            "claimAmount": 1000,
        }, 201, "submit claim")
        if claim:
            approved = self.call("PATCH", f"/api/finance/insurance/{claim['_id']}/status",
                                 {"status": "Approved", "approvedAmount": 800}, 200, "approve claim")
            self.expect(bool(approved) and approved["approvedAmount"] == 800, "claim approved for 800")
            self.call("PATCH", f"/api/finance/insurance/{claim['_id']}/status", {"status": "Maybe"}, 400,
                      "unknown claim status refused")
            detail = self.call("GET", f"/api/finance/bills/{bill['_id']}", description="bill detail")
            self.expect(bool(detail) and detail["totalAmount"] == 1000, "claim approval left bill total alone")

        revenue = self.call("GET", "/api/finance/stats/revenue", description="revenue stats")
        self.expect(bool(revenue) and len(revenue["monthlyData"]) == 6, "six months of revenue")
        self.call("GET", "/api/finance/stats/pending", description="pending stats")
        self.call("GET", "/api/finance/stats/overdue", description="overdue stats")

        if claim:
            self.call("DELETE", f"/api/finance/insurance/{claim['_id']}", description="delete claim")
        self.call("DELETE", f"/api/finance/bills/{bill['_id']}", description="delete bill")
        self.call("DELETE", f"/api/patients/{patient['_id']}", description="delete patient")
        return self.report()

    def report(self) -> bool:
        total = len(self.results)
        failed = len(self.errors)
        print(f"\n📊 {total - failed}/{total} checks passed")
        for r in self.errors:
            print(f"  - {r.method} {r.endpoint} [{r.status_code}] {r.description}: {r.error_message}")
        return failed == 0


if __name__ == "__main__":
    sys.exit(0 if SmokeRunner().run() else 1)
