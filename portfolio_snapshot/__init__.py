"""Portfolio snapshot: average-cost holdings, profit and activity feed from a transaction ledger."""
