import os

# Keep test runs off the default on-disk database.
os.environ.setdefault("TIMEBILL_DATABASE_URL", "sqlite://")
os.environ.setdefault("TIMEBILL_SEED_DEMO_DATA", "false")
