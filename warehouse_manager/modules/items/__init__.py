# warehouse_manager/modules/items/__init__.py
"""
Items module - per-warehouse stock keyed by (warehouse, SKU)

- router.py: /api/warehouses/{id}/items endpoints
- repository.py: item rows and quantity changes
- schemas.py: request/response models
"""
