from decimal import Decimal

from diagnostics import error_log
from transactions import AMOUNT_QUANTUM, Chargeback, Deposit, Dispute, Resolve, Withdrawal


def format_amount(amount):
    return str(amount.quantize(AMOUNT_QUANTUM))


class AccountState:
    def __init__(self, client_id, available=Decimal(0), held=Decimal(0), locked=False):
        self.client_id = client_id
        self.available = available
        self.held = held
        self.locked = locked

    @property
    def total(self):
        return self.available + self.held

    def to_row(self):
        return [
            self.client_id,
            format_amount(self.available),
            format_amount(self.held),
            format_amount(self.total),
            str(self.locked).lower(),
        ]

    def __eq__(self, other):
        if not isinstance(other, AccountState):
            return NotImplemented
        return (self.client_id, self.available, self.held, self.locked) == \
            (other.client_id, other.available, other.held, other.locked)

    def __repr__(self):
        return (f"AccountState(client_id={self.client_id}, available={self.available}, "
                f"held={self.held}, locked={self.locked})")


class AccountLedger:
    """Replays one client's transactions into its final account state.

    The account only comes into existence with the client's first deposit;
    anything earlier is discarded. A successful chargeback locks the account
    and every later transaction is discarded. Rejected transactions are never
    raised, just reported through error_log and skipped.
    """

    def __init__(self, client_id):
        self.client_id = client_id
        self.account = None
        self.deposit_amounts = {}
        self.disputed = set()

    def replay(self, transactions):
        for transaction in transactions:
            self.process(transaction)
        return self.account

    def process(self, transaction):
        if isinstance(transaction, Deposit):
            self.process_deposit(transaction)
            return

        if not isinstance(transaction, (Withdrawal, Dispute, Resolve, Chargeback)):
            raise TypeError(f"unsupported transaction {transaction!r}")

        if self.account is None:
            self.reject(transaction, "account does not exist")
            return

        if self.account.locked:
            self.reject(transaction, "account is locked")
            return

        if isinstance(transaction, Withdrawal):
            self.process_withdrawal(transaction)
        elif isinstance(transaction, Dispute):
            self.process_dispute(transaction)
        elif isinstance(transaction, Resolve):
            self.process_resolve(transaction)
        else:
            self.process_chargeback(transaction)

    def process_deposit(self, transaction):
        if self.account is None:
            self.account = AccountState(self.client_id)
        elif self.account.locked:
            self.reject(transaction, "account is locked")
            return

        if transaction.tx_id in self.deposit_amounts:
            # the newer amount replaces the recorded one for later disputes
            self.reject(transaction, "deposit overwrites existing tx_id, applied anyway")

        self.account.available += transaction.amount
        self.deposit_amounts[transaction.tx_id] = transaction.amount

    def process_withdrawal(self, transaction):
        if self.account.available < transaction.amount:
            self.reject(transaction, "nsf")
            return

        self.account.available -= transaction.amount

    def process_dispute(self, transaction):
        amount = self.deposit_amounts.get(transaction.tx_id)
        if amount is None:
            self.reject(transaction, "tx not found")
            return

        if transaction.tx_id in self.disputed:
            self.reject(transaction, "tx is already disputed")
            return

        self.account.available -= amount
        self.account.held += amount
        self.disputed.add(transaction.tx_id)

    def process_resolve(self, transaction):
        amount = self.deposit_amounts.get(transaction.tx_id)
        if amount is None:
            self.reject(transaction, "tx not found")
            return

        if transaction.tx_id not in self.disputed:
            self.reject(transaction, "tx is not disputed")
            return

        self.account.held -= amount
        self.account.available += amount
        self.disputed.discard(transaction.tx_id)

    def process_chargeback(self, transaction):
        amount = self.deposit_amounts.get(transaction.tx_id)
        if amount is None:
            self.reject(transaction, "tx not found")
            return

        if transaction.tx_id not in self.disputed:
            self.reject(transaction, "tx is not disputed")
            return

        self.account.held -= amount
        self.account.locked = True
        self.disputed.discard(transaction.tx_id)

    def reject(self, transaction, message):
        error_log(
            message,
            transaction.tx_id,
            transaction.client_id,
            transaction.record_type,
            getattr(transaction, "amount", None),
        )
