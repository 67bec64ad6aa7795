# sales/tests/test_settlement.py

from decimal import Decimal

from django.test import SimpleTestCase

from sales.services.settlement import (
    InvalidPaymentMethodError,
    SplitMismatchError,
    WalletBlockedError,
    WalletShortfallError,
    WalletState,
    enter_split_amount,
    propose_wallet_fallback,
    settle,
)

ACTIVE_50 = WalletState(status="active", balance=Decimal("50"))
ACTIVE_30 = WalletState(status="active", balance=Decimal("30"))


class SettlementTests(SimpleTestCase):
    def test_single_methods(self):
        for method in ("cash", "card_credit", "card_debit", "transfer"):
            result = settle(Decimal("99.90"), method, wallet=WalletState())
            self.assertEqual(result.payment_method, method)
            self.assertIsNone(result.payment_details)
            self.assertEqual(result.wallet_amount, Decimal("0.00"))

    def test_unknown_method(self):
        with self.assertRaises(InvalidPaymentMethodError):
            settle(Decimal("10"), "cheque", wallet=WalletState())

    def test_split_with_wallet(self):
        result = settle(
            Decimal("200.00"),
            "multiple",
            wallet=ACTIVE_50,
            splits={"cash": Decimal("150"), "wallet": Decimal("50"), "card_debit": Decimal("0")},
        )
        self.assertEqual(result.payment_method, "multiple")
        self.assertEqual(result.payment_details, {"cash": Decimal("150.00"), "wallet": Decimal("50.00")})
        self.assertEqual(result.wallet_amount, Decimal("50.00"))
        self.assertEqual(result.details_for_storage(), {"cash": "150.00", "wallet": "50.00"})

    def test_wallet_entry_clamps_and_reports_shortfall(self):
        entry = enter_split_amount({"cash": Decimal("150")}, "wallet", Decimal("50"), wallet=ACTIVE_30)

        self.assertEqual(entry.accepted, Decimal("30.00"))
        self.assertEqual(entry.shortfall, Decimal("20.00"))
        self.assertTrue(entry.was_clamped)
        self.assertEqual(entry.splits, {"cash": Decimal("150.00"), "wallet": Decimal("30.00")})

        # the clamped split no longer covers the total
        with self.assertRaises(SplitMismatchError):
            settle(Decimal("200"), "multiple", wallet=ACTIVE_30, splits=entry.splits)

    def test_wallet_over_balance_at_settle_raises_with_proposal(self):
        with self.assertRaises(WalletShortfallError) as cm:
            settle(
                Decimal("200"),
                "multiple",
                wallet=ACTIVE_30,
                splits={"cash": Decimal("150"), "wallet": Decimal("50")},
            )
        proposal = cm.exception.proposal
        self.assertEqual(proposal.shortfall, Decimal("20.00"))
        self.assertEqual(proposal.available, Decimal("30.00"))
        self.assertEqual(proposal.splits, {"wallet": Decimal("30.00"), "cash": Decimal("170.00")})

    def test_wallet_fallback_keeps_other_split_entries(self):
        with self.assertRaises(WalletShortfallError) as cm:
            settle(
                Decimal("200"),
                "multiple",
                wallet=ACTIVE_30,
                splits={"card_debit": Decimal("150"), "wallet": Decimal("50")},
            )
        proposal = cm.exception.proposal
        self.assertEqual(proposal.shortfall, Decimal("20.00"))
        self.assertEqual(
            proposal.splits,
            {"wallet": Decimal("30.00"), "card_debit": Decimal("150.00"), "cash": Decimal("20.00")},
        )

        accepted = settle(Decimal("200"), "multiple", wallet=ACTIVE_30, splits=proposal.splits)
        self.assertEqual(accepted.payment_details["card_debit"], Decimal("150.00"))
        self.assertEqual(accepted.wallet_amount, Decimal("30.00"))

    def test_wallet_only_insufficient_offers_fallback(self):
        with self.assertRaises(WalletShortfallError) as cm:
            settle(Decimal("80"), "wallet", wallet=ACTIVE_50)

        proposal = cm.exception.proposal
        self.assertEqual(proposal.splits, {"wallet": Decimal("50.00"), "cash": Decimal("30.00")})
        self.assertEqual(proposal.as_dict()["payment_method"], "multiple")

        accepted = settle(Decimal("80"), "multiple", wallet=ACTIVE_50, splits=proposal.splits)
        self.assertEqual(accepted.wallet_amount, Decimal("50.00"))

    def test_wallet_only_with_enough_balance(self):
        result = settle(Decimal("50"), "wallet", wallet=ACTIVE_50)
        self.assertEqual(result.wallet_amount, Decimal("50.00"))

    def test_non_active_wallet_always_rejected(self):
        for status in ("inactive", "pending"):
            wallet = WalletState(status=status, balance=Decimal("1000"))
            with self.assertRaises(WalletBlockedError):
                settle(Decimal("10"), "wallet", wallet=wallet)
            with self.assertRaises(WalletBlockedError):
                settle(
                    Decimal("10"),
                    "multiple",
                    wallet=wallet,
                    splits={"cash": Decimal("5"), "wallet": Decimal("5")},
                )

    def test_split_sum_tolerance(self):
        ok = settle(
            Decimal("100.00"),
            "multiple",
            wallet=WalletState(),
            splits={"cash": Decimal("60.00"), "transfer": Decimal("39.99")},
        )
        self.assertEqual(ok.payment_method, "multiple")

        with self.assertRaises(SplitMismatchError):
            settle(
                Decimal("100.00"),
                "multiple",
                wallet=WalletState(),
                splits={"cash": Decimal("60.00"), "transfer": Decimal("39.98")},
            )

    def test_negative_entries_clamp_to_zero(self):
        entry = enter_split_amount({}, "cash", Decimal("-15"), wallet=WalletState())
        self.assertEqual(entry.splits, {"cash": Decimal("0.00")})

        with self.assertRaises(SplitMismatchError):
            settle(
                Decimal("100"),
                "multiple",
                wallet=WalletState(),
                splits={"cash": Decimal("120"), "transfer": Decimal("-20")},
            )

    def test_fallback_method_cannot_be_wallet(self):
        with self.assertRaises(InvalidPaymentMethodError):
            propose_wallet_fallback(Decimal("10"), ACTIVE_30, fallback_method="wallet")
