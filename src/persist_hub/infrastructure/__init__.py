# src/persist_hub/infrastructure/__init__.py
"""基础设施层：对 SQLAlchemy 等第三方持久化框架的薄封装。"""
