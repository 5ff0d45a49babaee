import sys


class RecordFormatError(ValueError):
    """Input that is structurally malformed; aborts the run."""

    def __init__(self, message, line_num=None):
        if line_num is not None:
            message = f"line {line_num}: {message}"
        super().__init__(message)
        self.line_num = line_num


def error_log(message, tx_id=None, client_id=None, record_type=None, amount=None):
    if tx_id is not None and client_id is not None and record_type is not None:
        formatted_prefix = f"tx_id {tx_id}, client_id {client_id}, failed to apply {record_type}"
        amount_detail = ""
        if amount is not None:
            amount_detail = f" of ${amount}"
        print(f"{formatted_prefix}{amount_detail}: {message}", file=sys.stderr)
    else:
        print(f"transaction error: {message}", file=sys.stderr)
