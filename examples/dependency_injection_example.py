#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
依赖注入示例应用

展示 WireBoot 的字段注入、init 钩子注入与工厂函数注入
"""

import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Annotated, Optional

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wireboot import component, create_app, tag  # noqa: E402

app = create_app(name="依赖注入示例")


# ==================== 基础服务层 ====================

class DatabaseClient:
    """数据库客户端"""

    url: Annotated[str, tag(value="${DATABASE_URL:sqlite:///demo.db}")] = ""

    def query(self, sql: str):
        return [{"id": 1, "name": "用户1"}]


class CacheService:
    """缓存服务"""

    def __init__(self):
        self.cache = {}

    def get(self, key: str):
        return self.cache.get(key)

    def set(self, key: str, value):
        self.cache[key] = value


# ==================== 仓储层 ====================

class UserRepository(ABC):
    """用户仓储接口"""

    @abstractmethod
    def find_by_id(self, user_id: int): ...


class SqlUserRepository(UserRepository):
    """用户仓储 - init 钩子注入 DatabaseClient"""

    def __init__(self):
        self.db: Optional[DatabaseClient] = None

    def init(self, db: DatabaseClient):
        self.db = db
        print(f"✅ SqlUserRepository 已初始化（数据库: {db.url}）")

    def find_by_id(self, user_id: int):
        result = self.db.query(f"SELECT * FROM users WHERE id = {user_id}")
        return result[0] if result else {"id": user_id, "name": f"用户{user_id}"}


def new_user_repository() -> SqlUserRepository:
    """工厂函数，返回类型名即组件名 sqlUserRepository"""
    return SqlUserRepository()


# ==================== 服务层 ====================

@component()
class UserService:
    """用户服务 - 按标签注入接口实现，按字段名注入缓存"""

    user_repo: Annotated[Optional[UserRepository], tag(inject="sqlUserRepository")] = None
    cache_service: Optional[CacheService] = None

    def get_user(self, user_id: int):
        cached = self.cache_service.get(f"user:{user_id}")
        if cached:
            print(f"📦 从缓存获取用户 {user_id}")
            return cached

        user = self.user_repo.find_by_id(user_id)
        self.cache_service.set(f"user:{user_id}", user)
        print(f"💾 用户 {user_id} 已存入缓存")
        return user


@component("orderService")
class OrderService:
    """订单服务"""

    user_service: Optional[UserService] = None
    app_name: Annotated[str, tag(value="${app.name}")] = ""

    def create_order(self, user_id: int, product: str):
        user = self.user_service.get_user(user_id)
        return {
            "order_id": 12345,
            "user": user["name"],
            "product": product,
            "source": self.app_name,
            "status": "created"
        }


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("依赖注入示例应用")
    print("=" * 60 + "\n")

    app.component(CacheService())
    app.component(new_user_repository)
    app.component(UserService)
    app.component(OrderService)
    app.build_components()

    order_service = app.get_instance("orderService")
    print(order_service.create_order(1, "键盘"))
    print(order_service.create_order(1, "鼠标"))
