import os

# keep imports of database.py away from the on-disk default
os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite://")
os.environ.setdefault("LEDGER_TIMEZONE", "UTC")
os.environ.setdefault("LEDGER_SECRET_KEY", "test-secret")
