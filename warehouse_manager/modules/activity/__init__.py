# warehouse_manager/modules/activity/__init__.py
"""
Activity module - best-effort log of inventory actions
"""
