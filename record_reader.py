import csv
from decimal import InvalidOperation

from diagnostics import RecordFormatError, error_log
from transactions import AMOUNT_TYPES, MAX_CLIENT_ID, MAX_TX_ID, TRANSACTION_TYPES, normalize_amount

DEFAULT_FIELD_ORDER = ["type", "client", "tx", "amount"]
REQUIRED_FIELDS = {"type", "client", "tx"}


class RecordReader:
    """Turns CSV rows into typed transactions, in file order.

    Structural problems (short rows, non-numeric or out of range ids) raise
    RecordFormatError. Rows that are well formed but carry an unknown type or
    an amount that doesn't fit the type are logged and dropped.
    """

    def __init__(self):
        self.discover_field_order(DEFAULT_FIELD_ORDER)

    def discover_field_order(self, header):
        fields = [field.strip().lower() for field in header]
        self.type_field_idx = fields.index("type")
        self.client_field_idx = fields.index("client")
        self.tx_field_idx = fields.index("tx")
        self.amount_field_idx = fields.index("amount") if "amount" in fields else None
        self.min_width = max(self.type_field_idx, self.client_field_idx, self.tx_field_idx) + 1
        self.max_width = len(fields)

    @staticmethod
    def is_header(row):
        return REQUIRED_FIELDS.issubset(field.strip().lower() for field in row)

    def read_transactions(self, filename):
        if not filename:
            raise RuntimeError("no filename to read has been set. aborting.")
        with open(filename, newline="", encoding="utf-8-sig") as file:
            try:
                return list(self.parse_rows(csv.reader(file)))
            except UnicodeDecodeError as e:
                raise RecordFormatError(f"input is not valid utf-8: {e}") from e

    def parse_rows(self, rows):
        # each input starts from the default layout until its own header says otherwise
        self.discover_field_order(DEFAULT_FIELD_ORDER)
        first = True
        for line_num, row in enumerate(rows, start=1):
            if not row:
                continue
            if first:
                first = False
                if self.is_header(row):
                    self.discover_field_order(row)
                    continue
            transaction = self.parse_record(row, line_num)
            if transaction is not None:
                yield transaction

    def parse_record(self, row, line_num=None):
        record = [field.strip() for field in row]

        if len(record) < self.min_width:
            raise RecordFormatError(f"expected at least {self.min_width} fields, got {len(record)}", line_num)
        if len(record) > self.max_width:
            raise RecordFormatError(f"expected at most {self.max_width} fields, got {len(record)}", line_num)

        record_type = record[self.type_field_idx].lower()
        client_id = self.parse_id(record[self.client_field_idx], "client", MAX_CLIENT_ID, line_num)
        tx_id = self.parse_id(record[self.tx_field_idx], "tx", MAX_TX_ID, line_num)

        raw_amount = ""
        if self.amount_field_idx is not None and self.amount_field_idx < len(record):
            raw_amount = record[self.amount_field_idx]

        transaction_cls = TRANSACTION_TYPES.get(record_type)
        if transaction_cls is None:
            error_log("invalid record_type", tx_id, client_id, record_type)
            return None

        if record_type not in AMOUNT_TYPES:
            if raw_amount:
                error_log("unexpected amount", tx_id, client_id, record_type, raw_amount)
                return None
            return transaction_cls(client_id, tx_id)

        if not raw_amount:
            error_log("missing amount", tx_id, client_id, record_type)
            return None

        try:
            amount = normalize_amount(raw_amount)
        except (ValueError, InvalidOperation) as e:
            error_log(f"invalid amount: {e!r}", tx_id, client_id, record_type, raw_amount)
            return None

        return transaction_cls(client_id, tx_id, amount)

    @staticmethod
    def parse_id(text, name, upper_bound, line_num):
        try:
            value = int(text)
        except ValueError:
            raise RecordFormatError(f"invalid {name} id {text!r}", line_num) from None

        if not (0 <= value <= upper_bound):
            raise RecordFormatError(f"{name} id {value} out of range", line_num)
        return value
