# warehouse_manager/modules/warehouses/__init__.py
"""
Warehouses module - warehouse records and their occupied capacity

- router.py: /api/warehouses endpoints
- repository.py: warehouse rows, occupancy choke point, capacity ledger
- schemas.py: request/response models
"""
