import csv
import sys

from account_ledger import AccountLedger
from diagnostics import RecordFormatError
from record_reader import RecordReader

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]


def group_by_client(transactions):
    account_histories = {}
    for transaction in transactions:
        account_histories.setdefault(transaction.client_id, []).append(transaction)
    return account_histories


def replay(transactions):
    """Replay every client's history and return the resulting account states.

    Each client is replayed on its own, in input order, by a fresh
    AccountLedger. Clients that never made a deposit have no account and are
    left out. The result is sorted by client id.
    """
    account_histories = group_by_client(transactions)
    account_states = []
    for client_id in sorted(account_histories):
        account = AccountLedger(client_id).replay(account_histories[client_id])
        if account is not None:
            account_states.append(account)
    return account_states


class ReplayEngine:
    def __init__(self, filename):
        self.filename = filename
        self.reader = RecordReader()

    def read_transaction_data(self):
        return self.reader.read_transactions(self.filename)

    def get_account_states(self):
        return replay(self.read_transaction_data())

    def generate_output(self, stream=None):
        account_states = self.get_account_states()
        csvwriter = csv.writer(stream or sys.stdout, lineterminator="\n")
        csvwriter.writerow(OUTPUT_FIELDS)
        for account in account_states:
            csvwriter.writerow(account.to_row())


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: ledger-replay <transactions.csv>", file=sys.stderr)
        return 1

    try:
        ReplayEngine(args[0]).generate_output()
    except (OSError, csv.Error, RecordFormatError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
