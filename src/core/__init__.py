"""Core domain package for txscope.

Core contains address resolution, fan-out, paging, and deposit
classification logic without any HTTP or index-specific code, keeping the
aggregation rules portable across index backends.
"""
