"""
Storefront Admin Dashboard

Analytics backend for the storefront admin: turns raw order, product and
user listings from the admin REST API into dashboard-ready summaries,
trends and rankings.

To connect to Streamlit:
    Call dashboard.build_overview_from_records(orders, products, users, now)
    to get a plain dict of summary counters plus DataFrames for the recent
    orders table, revenue trend and top products.

To swap the data source:
    Replace StorefrontApiClient.fetch_all with any callable returning
    (orders, products, users) as lists of API-shaped dicts; the fact and
    dimension schemas in transforms stay unchanged.

To change the status pie chart:
    Edit config.HISTOGRAM_STATUSES; labels and colours come from
    config.ORDER_STATUS_REGISTRY.
"""
