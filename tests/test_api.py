import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gym_locker.database import Base, get_db
from gym_locker.main import app
from gym_locker.models import Locker
from gym_locker.services.rental_period import add_months, current_date


class LockerApiTest(unittest.TestCase):
    def setUp(self):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        db = self.SessionLocal()
        locker = Locker(number="B-07", monthly_fee=40000)
        db.add(locker)
        db.commit()
        self.locker_id = locker.id
        db.close()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def pay(self, **overrides):
        payload = {
            "member_id": "M-100",
            "member_name": "이영희",
            "months": 3,
            "start_date": current_date(),
            "payment_method": "card",
        }
        payload.update(overrides)
        return self.client.post(f"/api/lockers/{self.locker_id}/payments", json=payload)

    def test_health(self):
        r = self.client.get("/health")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"status": "ok"})

    def test_discount_policy(self):
        body = self.client.get("/api/discount-policy").json()
        self.assertEqual(
            body["tiers"],
            [
                {"min_months": 12, "rate": 15},
                {"min_months": 6, "rate": 10},
                {"min_months": 3, "rate": 5},
            ],
        )
        self.assertEqual(body["default_monthly_fee"], 50000)
        self.assertEqual(len(body["month_options"]), 4)

    def test_payment_preview(self):
        r = self.client.get(
            "/api/lockers/payment-preview",
            params={"months": 3, "monthly_fee": 50000, "start_date": "2025-01-15"},
        )
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["original_amount"], 150000)
        self.assertEqual(body["discount_amount"], 7500)
        self.assertEqual(body["final_amount"], 142500)
        self.assertEqual(body["end_date"], "2025-04-15")
        self.assertIn("5%", body["discount_description"])

    def test_payment_preview_extension(self):
        r = self.client.get(
            "/api/lockers/payment-preview",
            params={
                "months": 3,
                "monthly_fee": 50000,
                "start_date": "2025-01-15",
                "is_extension": "true",
                "current_end_date": "2025-03-15",
            },
        )
        body = r.json()
        self.assertEqual(body["start_date"], "2025-03-15")
        self.assertEqual(body["end_date"], "2025-06-15")

    def test_payment_preview_rejects_bad_input(self):
        r = self.client.get("/api/lockers/payment-preview", params={"months": 13})
        self.assertEqual(r.status_code, 400)
        r = self.client.get("/api/lockers/payment-preview", params={"months": 1, "start_date": "2025-13-01"})
        self.assertEqual(r.status_code, 400)

    def test_quote(self):
        r = self.client.get(f"/api/lockers/{self.locker_id}/quote", params={"months": 1, "start_date": "2025-01-31"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["final_amount"], 40000)
        self.assertEqual(r.json()["end_date"], "2025-02-28")

        r = self.client.get("/api/lockers/999/quote", params={"months": 1})
        self.assertEqual(r.status_code, 404)

    def test_create_payment_and_history(self):
        r = self.pay()
        self.assertEqual(r.status_code, 201)
        body = r.json()
        self.assertEqual(body["amount"], 114000)
        self.assertEqual(body["new_end_date"], add_months(current_date(), 3))

        history = self.client.get(f"/api/lockers/{self.locker_id}/payments").json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["payment_method_label"], "카드")
        self.assertEqual(history[0]["discount_rate"], 5)

    def test_extension_payment(self):
        self.pay()
        r = self.pay(months=1, is_extension=True)
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.json()["new_end_date"], add_months(add_months(current_date(), 3), 1))

    def test_extension_of_expired_locker(self):
        db = self.SessionLocal()
        locker = db.get(Locker, self.locker_id)
        locker.member_id = "M-100"
        locker.member_name = "이영희"
        locker.start_date = "2000-01-01"
        locker.end_date = "2000-04-01"
        db.commit()
        db.close()

        r = self.pay(months=1, is_extension=True)
        self.assertEqual(r.status_code, 201, r.text)
        self.assertEqual(r.json()["new_end_date"], "2000-05-01")

    def test_history_limit(self):
        self.pay()
        self.pay(months=1, is_extension=True)
        history = self.client.get(f"/api/lockers/{self.locker_id}/payments", params={"limit": 1}).json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["months"], 1)

    def test_create_payment_validation_errors(self):
        r = self.pay(start_date="2000-01-01")
        self.assertEqual(r.status_code, 422)
        self.assertIn("start_date", r.json()["detail"]["errors"])

    def test_create_payment_invalid_method(self):
        r = self.pay(payment_method="bitcoin")
        self.assertEqual(r.status_code, 400)

    def test_create_payment_unknown_locker(self):
        r = self.client.post(
            "/api/lockers/999/payments",
            json={
                "member_id": "M-100",
                "member_name": "이영희",
                "months": 1,
                "start_date": current_date(),
                "payment_method": "cash",
            },
        )
        self.assertEqual(r.status_code, 404)

    def test_usage_period(self):
        r = self.client.post(f"/api/lockers/{self.locker_id}/usage-period", json={"new_end_date": "2026-05-31"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"locker_id": self.locker_id, "end_date": "2026-05-31"})

        r = self.client.post("/api/lockers/999/usage-period", json={"new_end_date": "2026-05-31"})
        self.assertEqual(r.status_code, 404)

    def test_cancel_payment(self):
        payment_id = self.pay().json()["payment_id"]

        r = self.client.post(f"/api/locker-payments/{payment_id}/cancel", json={"reason": "환불 요청"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["refund_amount"], 114000)

        r = self.client.post(f"/api/locker-payments/{payment_id}/cancel", json={"reason": "중복"})
        self.assertEqual(r.status_code, 409)

        r = self.client.post("/api/locker-payments/999/cancel")
        self.assertEqual(r.status_code, 404)


if __name__ == "__main__":
    unittest.main()
