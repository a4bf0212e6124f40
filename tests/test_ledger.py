"""Tests for Ledger primitives and amount arithmetic."""

import pytest

from hptcore import (
    MAX_UINT256,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    Ledger,
    Overflow,
    Underflow,
    expand_to_decimals,
)
from hptcore.uint import checked_add, checked_sub, require_amount


class TestAmounts:
    def test_valid_bounds(self):
        assert require_amount(0) == 0
        assert require_amount(MAX_UINT256) == MAX_UINT256

    @pytest.mark.parametrize("amount", [-1, MAX_UINT256 + 1, 1.0, "10", True, None])
    def test_invalid(self, amount):
        with pytest.raises(InvalidAmount):
            require_amount(amount)

    def test_checked_add_overflow(self):
        assert checked_add(MAX_UINT256 - 1, 1) == MAX_UINT256
        with pytest.raises(Overflow):
            checked_add(MAX_UINT256, 1)

    def test_checked_sub_underflow(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(Underflow):
            checked_sub(5, 6)

    def test_expand_to_decimals(self):
        assert expand_to_decimals(10) == 10 * 10**18
        assert expand_to_decimals(3, decimals=2) == 300

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            require_amount(-5)


class TestConstruction:
    def test_initial_mint(self):
        ledger = Ledger("alice", supply=1_000_000)
        assert ledger.balance_of("alice") == 1_000_000
        assert ledger.total_supply() == 1_000_000
        assert ledger.is_conserved()

    def test_absent_entries_are_zero(self):
        ledger = Ledger("alice", supply=100)
        assert ledger.balance_of("nobody") == 0
        assert ledger.allowance_of("alice", "nobody") == 0

    def test_zero_supply(self):
        ledger = Ledger("alice", supply=0)
        assert ledger.holders() == {}
        assert ledger.is_conserved()

    def test_invalid_supply(self):
        with pytest.raises(InvalidAmount):
            Ledger("alice", supply=-1)

    def test_instances_are_independent(self):
        a = Ledger("alice", supply=100)
        b = Ledger("alice", supply=100)
        a.debit("alice", 40)
        assert b.balance_of("alice") == 100


class TestCreditDebit:
    def test_credit(self):
        ledger = Ledger("alice", supply=100)
        ledger.credit("bob", 25)
        assert ledger.balance_of("bob") == 25

    def test_credit_overflow_leaves_balance(self):
        ledger = Ledger("alice", supply=MAX_UINT256)
        with pytest.raises(Overflow):
            ledger.credit("alice", 1)
        assert ledger.balance_of("alice") == MAX_UINT256

    def test_debit(self):
        ledger = Ledger("alice", supply=100)
        ledger.debit("alice", 30)
        assert ledger.balance_of("alice") == 70

    def test_debit_exact_balance(self):
        ledger = Ledger("alice", supply=100)
        ledger.debit("alice", 100)
        assert ledger.balance_of("alice") == 0
        assert "alice" not in ledger.holders()

    def test_debit_insufficient(self):
        ledger = Ledger("alice", supply=100)
        with pytest.raises(InsufficientBalance, match="alice has 100, needs 101") as exc:
            ledger.debit("alice", 101)
        assert exc.value.account == "alice"
        assert exc.value.balance == 100
        assert exc.value.needed == 101
        assert ledger.balance_of("alice") == 100

    def test_debit_unknown_account(self):
        ledger = Ledger("alice", supply=100)
        with pytest.raises(InsufficientBalance):
            ledger.debit("bob", 1)

    def test_zero_debit_unknown_account(self):
        ledger = Ledger("alice", supply=100)
        ledger.debit("bob", 0)
        assert ledger.balance_of("bob") == 0

    def test_negative_debit_rejected(self):
        ledger = Ledger("alice", supply=100)
        with pytest.raises(InvalidAmount):
            ledger.debit("alice", -10)
        assert ledger.balance_of("alice") == 100


class TestAllowances:
    def test_set_overwrites(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", 10)
        ledger.set_allowance("alice", "bob", 3)
        assert ledger.allowance_of("alice", "bob") == 3

    def test_allowance_is_directional(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", 10)
        assert ledger.allowance_of("bob", "alice") == 0

    def test_spend_decrements(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", 10)
        ledger.spend_allowance("alice", "bob", 4)
        assert ledger.allowance_of("alice", "bob") == 6

    def test_spend_to_zero_keeps_entry(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", 10)
        ledger.spend_allowance("alice", "bob", 10)
        assert ledger.allowance_of("alice", "bob") == 0
        assert ledger.allowances() == {("alice", "bob"): 0}

    def test_spend_insufficient(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", 10)
        with pytest.raises(InsufficientAllowance, match="Insufficient allowance"):
            ledger.spend_allowance("alice", "bob", 11)
        assert ledger.allowance_of("alice", "bob") == 10

    def test_unlimited_is_not_decremented(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", MAX_UINT256)
        ledger.spend_allowance("alice", "bob", 50)
        assert ledger.allowance_of("alice", "bob") == MAX_UINT256

    def test_one_below_unlimited_is_decremented(self):
        ledger = Ledger("alice", supply=100)
        ledger.set_allowance("alice", "bob", MAX_UINT256 - 1)
        ledger.spend_allowance("alice", "bob", 1)
        assert ledger.allowance_of("alice", "bob") == MAX_UINT256 - 2


class TestSupply:
    def test_reduce_supply(self):
        ledger = Ledger("alice", supply=100)
        ledger.debit("alice", 40)
        ledger.reduce_supply(40)
        assert ledger.total_supply() == 60
        assert ledger.is_conserved()

    def test_reduce_supply_underflow(self):
        ledger = Ledger("alice", supply=100)
        with pytest.raises(Underflow):
            ledger.reduce_supply(101)
        assert ledger.total_supply() == 100

    def test_conservation_detects_drift(self):
        ledger = Ledger("alice", supply=100)
        ledger.credit("bob", 1)
        assert not ledger.is_conserved()


class TestSnapshot:
    def test_snapshot_is_json_safe(self):
        ledger = Ledger("alice", supply=MAX_UINT256)
        ledger.set_allowance("alice", "bob", 7)
        snap = ledger.snapshot()
        assert snap == {
            "total_supply": str(MAX_UINT256),
            "balances": {"alice": str(MAX_UINT256)},
            "allowances": {"alice": {"bob": "7"}},
        }

    def test_state_hash_tracks_changes(self):
        a = Ledger("alice", supply=100)
        b = Ledger("alice", supply=100)
        assert a.state_hash() == b.state_hash()
        a.debit("alice", 1)
        a.credit("bob", 1)
        assert a.state_hash() != b.state_hash()
        assert len(a.state_hash()) == 64

    def test_allowance_keys_do_not_collide(self):
        a = Ledger("alice", supply=100)
        b = Ledger("alice", supply=100)
        a.set_allowance("o:p", "s", 5)
        b.set_allowance("o", "p:s", 5)
        assert a.snapshot()["allowances"] == {"o:p": {"s": "5"}}
        assert b.snapshot()["allowances"] == {"o": {"p:s": "5"}}
        assert a.state_hash() != b.state_hash()
