"""Strategy Paywall: tier resolution, monthly view quotas and gated strategy access."""

__version__ = "1.0.0"
