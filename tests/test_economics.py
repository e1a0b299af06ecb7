import math
import unittest

from utils.economics import (
    UNDEFINED,
    compute_escalated_npv,
    escalation_multiplier,
    is_undefined,
    safe_divide,
)


class EconomicModuleTests(unittest.TestCase):
    def test_known_escalated_npv(self) -> None:
        npv = compute_escalated_npv(
            upfront_cost=1000.0,
            annual_savings=100.0,
            years=3,
            discount_rate_pct=5.0,
            escalation_rate_pct=10.0,
        )

        expected = -1000.0 + 110.0 / 1.05 + 121.0 / 1.05**2 + 133.1 / 1.05**3
        self.assertAlmostEqual(npv, expected, places=9)

    def test_zero_rates_sum_savings(self) -> None:
        npv = compute_escalated_npv(500.0, 100.0, 10, 0.0, 0.0)
        self.assertAlmostEqual(npv, 500.0, places=9)

    def test_zero_years_returns_negative_upfront(self) -> None:
        self.assertEqual(compute_escalated_npv(250.0, 100.0, 0, 3.0, 2.0), -250.0)

    def test_negative_upfront_cost_adds_value(self) -> None:
        npv = compute_escalated_npv(-200.0, 0.0, 5, 3.0, 2.0)
        self.assertEqual(npv, 200.0)

    def test_escalation_multiplier_starts_at_one(self) -> None:
        self.assertEqual(escalation_multiplier(2.0, 1), 1.0)
        self.assertAlmostEqual(escalation_multiplier(2.0, 3), 1.0404, places=12)

    def test_safe_divide_returns_undefined_on_zero(self) -> None:
        self.assertTrue(math.isnan(safe_divide(10.0, 0.0)))
        self.assertEqual(safe_divide(10.0, 4.0), 2.5)
        self.assertEqual(safe_divide(-10.0, 4.0), -2.5)

    def test_is_undefined(self) -> None:
        self.assertTrue(is_undefined(UNDEFINED))
        self.assertTrue(is_undefined(None))
        self.assertTrue(is_undefined(float("inf")))
        self.assertFalse(is_undefined(0.0))


if __name__ == "__main__":
    unittest.main()
