"""Common constants used across the application."""

# Settings keys
SETTING_SHOP_NAME = "shop_name"
SETTING_VISITOR_COUNT = "visitor_count"

SHOP_NAME_MAX_LENGTH = 64

# Order list filter value that disables status filtering
ORDER_STATUS_FILTER_ALL = "all"

# Dashboard windows
STATS_WEEK_DAYS = 7
STATS_MONTH_DAYS = 30
