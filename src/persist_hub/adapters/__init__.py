# src/persist_hub/adapters/__init__.py
"""
内置适配器：缓存后端、元数据驱动、引擎事件订阅者、列类型/命名策略/SQL 函数。
注册到容器的方式见 `persist_hub.registries`。
"""
