"""NetLog Insight: paste network-device logs, get an AI dashboard and report."""
