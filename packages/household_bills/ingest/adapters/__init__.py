"""Bank export adapters producing :class:`~household_bills.models.TransactionRecord`."""
