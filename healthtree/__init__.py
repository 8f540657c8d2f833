"""healthtree: hierarchical health-check aggregation engine."""
