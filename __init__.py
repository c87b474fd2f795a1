"""ExpensePilot personal finance dashboard.

Streamlit app for logging expenses and income, with per-category totals
and AI-assisted categorization. See ``app.py`` for the page and
``mock_api.py`` for the local development services.
"""
