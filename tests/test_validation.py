import unittest
from datetime import date

from gym_locker.services.validation import (
    VALIDATION_MESSAGES,
    FieldError,
    PaymentValidationData,
    validate_payment_data,
)


TODAY = date(2026, 3, 1)


def make_data(**overrides) -> PaymentValidationData:
    values = {
        "months": 3,
        "payment_method": "cash",
        "start_date": "2026-03-15",
        "amount": 142500,
    }
    values.update(overrides)
    return PaymentValidationData(**values)


class ValidatePaymentDataTest(unittest.TestCase):
    def test_valid_payment(self):
        result = validate_payment_data(make_data(), today=TODAY)
        self.assertTrue(result.is_valid)
        self.assertEqual(result.errors, {})

    def test_months_below_minimum(self):
        for months in (0, -1, None):
            result = validate_payment_data(make_data(months=months), today=TODAY)
            self.assertFalse(result.is_valid)
            self.assertEqual(result.errors["months"], VALIDATION_MESSAGES["MONTHS_MIN"])

    def test_months_above_maximum(self):
        result = validate_payment_data(make_data(months=13), today=TODAY)
        self.assertEqual(result.errors, {"months": VALIDATION_MESSAGES["MONTHS_MAX"]})

    def test_month_bounds_are_inclusive(self):
        self.assertTrue(validate_payment_data(make_data(months=1), today=TODAY).is_valid)
        self.assertTrue(validate_payment_data(make_data(months=12), today=TODAY).is_valid)

    def test_payment_method_required(self):
        for method in ("", None):
            result = validate_payment_data(make_data(payment_method=method), today=TODAY)
            self.assertIn("payment_method", result.errors)

    def test_any_payment_method_value_is_accepted(self):
        result = validate_payment_data(make_data(payment_method="voucher"), today=TODAY)
        self.assertTrue(result.is_valid)

    def test_past_start_date_rejected(self):
        result = validate_payment_data(make_data(start_date="2000-01-01"), today=TODAY)
        self.assertFalse(result.is_valid)
        self.assertEqual(result.errors["start_date"], VALIDATION_MESSAGES["START_DATE_PAST"])

    def test_yesterday_rejected(self):
        result = validate_payment_data(make_data(start_date="2026-02-28"), today=TODAY)
        self.assertIn("start_date", result.errors)

    def test_today_accepted(self):
        result = validate_payment_data(make_data(start_date="2026-03-01"), today=TODAY)
        self.assertTrue(result.is_valid)
        result = validate_payment_data(make_data(start_date=TODAY), today=TODAY)
        self.assertTrue(result.is_valid)

    def test_start_date_required(self):
        result = validate_payment_data(make_data(start_date=""), today=TODAY)
        self.assertEqual(result.errors["start_date"], VALIDATION_MESSAGES["START_DATE_REQUIRED"])

    def test_amount_must_be_positive(self):
        for amount in (0, -100, None):
            result = validate_payment_data(make_data(amount=amount), today=TODAY)
            self.assertEqual(result.errors["amount"], VALIDATION_MESSAGES["AMOUNT_MIN"])

    def test_all_failing_fields_reported(self):
        data = PaymentValidationData(months=0, payment_method="", start_date="2000-01-01", amount=0)
        result = validate_payment_data(data, today=TODAY)
        self.assertFalse(result.is_valid)
        self.assertEqual(
            [error.field for error in result.field_errors],
            ["months", "payment_method", "start_date", "amount"],
        )
        self.assertIsInstance(result.field_errors[0], FieldError)

    def test_defaults_to_current_date(self):
        result = validate_payment_data(make_data(start_date="2000-01-01"))
        self.assertIn("start_date", result.errors)

    def test_malformed_start_date_raises(self):
        with self.assertRaises(ValueError):
            validate_payment_data(make_data(start_date="2026/03/15"), today=TODAY)


if __name__ == "__main__":
    unittest.main()
