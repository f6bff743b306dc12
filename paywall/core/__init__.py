"""Core domain logic: access control, usage metering and billing sync."""
