class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class CorruptHierarchyError(LedgerError):
    def __init__(self, category_id: str, chain: tuple[str, ...], reason: str = "cycle"):
        self.category_id = category_id
        self.chain = chain
        self.reason = reason
        super().__init__(
            f"Corrupt category hierarchy at {category_id!r} ({reason}): "
            + " -> ".join(chain)
        )


class UnknownReferenceError(LedgerError):
    def __init__(self, kind: str, ref_id: str):
        self.kind = kind
        self.ref_id = ref_id
        super().__init__(f"Unknown {kind} reference: {ref_id!r}")


class InvalidPeriodError(LedgerError):
    def __init__(self, period):
        self.period = period
        super().__init__(f"Invalid period {period!r}, expected 'YYYY-MM'")


class InvalidAmountError(LedgerError):
    def __init__(self, value, reason: str = "invalid amount"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount {value!r}: {reason}")
