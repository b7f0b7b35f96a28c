"""Scenarios for generating demo ledger sessions."""

from loan_ledger.scenarios.sample_portfolio import SamplePortfolioScenario

__all__ = ["SamplePortfolioScenario"]
