"""Pharmacy portal: BestRX refill and transfer submission toolkit."""

__version__ = "1.0.0"
