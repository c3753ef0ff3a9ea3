"""测试用的映射类。"""
