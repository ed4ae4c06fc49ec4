"""Presentation constants shared by the editor and list endpoints."""

# Transient success/error banners auto-dismiss after this many seconds
BANNER_SECONDS = 3.5

CURRENCY = 'LKR'

# Preset rows offered by the invoice editor's quick-add list
QUICK_ADD_SERVICES = [
    {'name': 'Generator Maintenance', 'price': 15000},
    {'name': 'Battery Replacement', 'price': 8000},
    {'name': 'Oil Change Service', 'price': 3500},
    {'name': 'Filter Replacement', 'price': 2500},
    {'name': 'Emergency Repair', 'price': 18000},
    {'name': 'Installation Service', 'price': 12000},
    {'name': 'Annual Service Contract', 'price': 75000},
]
