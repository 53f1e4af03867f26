"""
Market pages.

Each page is a QueryGroup wiring MarketDataPort calls into sections
at their own cadence, plus the selections that drive dependent
sections.
"""
